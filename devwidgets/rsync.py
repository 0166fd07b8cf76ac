"""Rsync command-line generator.

Builds an rsync invocation from transfer direction, path settings, selected
option flags and exclude patterns. Nothing here runs rsync; the result is
only a string.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Sequence

DEFAULT_SSH_PORT = "22"


class TransferDirection(Enum):
    """Which side is the source of the transfer."""
    LOCAL_TO_REMOTE = "local-to-remote"
    REMOTE_TO_LOCAL = "remote-to-local"
    SERVER_TO_SERVER = "server-to-server"


@dataclass
class RsyncOption:
    flag: str
    description: str
    enabled: bool = False


def default_options() -> List[RsyncOption]:
    """The option catalogue with its default selection."""
    return [
        RsyncOption("a", "Archive mode (recursive, preserves permissions, etc.)"),
        RsyncOption("v", "Verbose output", True),
        RsyncOption("z", "Compress file data during transfer", True),
        RsyncOption("P", "Show progress and keep partially transferred files", True),
        RsyncOption("n", "Dry run (simulation)"),
        RsyncOption("u", "Skip files that are newer on the destination"),
        RsyncOption("h", "Output numbers in a human-readable format"),
        RsyncOption("e", "Specify the remote shell", True),
        RsyncOption("--delete", "Delete files on destination that don't exist on source"),
        RsyncOption("--exclude", "Exclude files matching pattern"),
    ]


def enabled_flags(options: Iterable[RsyncOption]) -> List[str]:
    """Flags of the enabled options, in catalogue order."""
    return [option.flag for option in options if option.enabled]


def toggle_option(options: List[RsyncOption], flag: str) -> None:
    """Flip the enabled state of ``flag``.

    Raises:
        KeyError: If ``flag`` is not in the catalogue.
    """
    for option in options:
        if option.flag == flag:
            option.enabled = not option.enabled
            return
    raise KeyError(flag)


def add_exclude_pattern(patterns: List[str], pattern: str) -> None:
    """Append a stripped pattern. Blank patterns are ignored."""
    pattern = pattern.strip()
    if pattern:
        patterns.append(pattern)


def remove_exclude_pattern(patterns: List[str], index: int) -> None:
    del patterns[index]


@dataclass
class ServerConfig:
    username: str = "user"
    server: str = "server"
    path: str = "/remote/path/"
    port: str = DEFAULT_SSH_PORT

    @property
    def target(self) -> str:
        """rsync remote target, ``user@server:path``."""
        return f"{self.username}@{self.server}:{self.path}"


@dataclass
class PathConfig:
    """Paths for every direction.

    ``remote`` is used by the local/remote directions, ``source`` and
    ``dest`` by server-to-server transfers.
    """
    local_path: str = "./local/path/"
    remote: ServerConfig = field(default_factory=ServerConfig)
    source: ServerConfig = field(
        default_factory=lambda: ServerConfig("source-user", "source-server", "/source/path/")
    )
    dest: ServerConfig = field(
        default_factory=lambda: ServerConfig("dest-user", "dest-server", "/destination/path/")
    )


def _ssh_port_option(port: str) -> str:
    return f'-e "ssh -p {port}" '


def build_command(
    direction: TransferDirection,
    paths: PathConfig,
    flags: Sequence[str],
    exclude_patterns: Sequence[str] = (),
) -> str:
    """Assemble the rsync command line.

    Args:
        direction: Transfer direction.
        paths: Local path and server settings.
        flags: Enabled option flags, e.g. ``["v", "z", "P", "e"]``.
        exclude_patterns: Patterns passed as ``--exclude`` when that flag is set.

    Returns:
        The command string. Input strings are passed through verbatim.
    """
    cmd = "rsync "

    short_flags = "".join(f for f in flags if not f.startswith("--") and f != "e")
    long_flags = [f for f in flags if f.startswith("--") and f != "--exclude"]
    groups = []
    if short_flags:
        groups.append(f"-{short_flags}")
    groups.extend(long_flags)
    if groups:
        cmd += " ".join(groups) + " "

    if "--exclude" in flags:
        for pattern in exclude_patterns:
            cmd += f'--exclude="{pattern}" '

    if direction == TransferDirection.SERVER_TO_SERVER:
        source, dest = paths.source, paths.dest
        if source.port != DEFAULT_SSH_PORT:
            cmd += _ssh_port_option(source.port)
        cmd += f"{source.target} "
        # rsync runs on the source host and reaches the destination over ssh
        cmd += f'--rsync-path="ssh -p {dest.port} {dest.username}@{dest.server} rsync" {dest.target}'
        return cmd

    if "e" in flags and paths.remote.port != DEFAULT_SSH_PORT:
        cmd += _ssh_port_option(paths.remote.port)
    if direction == TransferDirection.LOCAL_TO_REMOTE:
        cmd += f"{paths.local_path} {paths.remote.target}"
    else:
        cmd += f"{paths.remote.target} {paths.local_path}"
    return cmd


# ─────────────────────────────────────────────────────────────────────────────
# Transfer preview
# ─────────────────────────────────────────────────────────────────────────────

DELETED = "DELETED"


@dataclass(frozen=True)
class FileItem:
    name: str
    type: str  # "file" | "directory"
    size: str


SAMPLE_SOURCE = [
    FileItem("data.txt", "file", "5.4 KB"),
    FileItem("images/", "directory", "-- KB"),
    FileItem("images/photo1.jpg", "file", "1.2 MB"),
    FileItem("images/photo2.jpg", "file", "950 KB"),
    FileItem("config.json", "file", "2.1 KB"),
    FileItem("logs/", "directory", "-- KB"),
    FileItem("logs/app.log", "file", "234 KB"),
]

SAMPLE_DESTINATION = [
    FileItem("data.txt", "file", "4.9 KB"),
    FileItem("images/", "directory", "-- KB"),
    FileItem("images/photo1.jpg", "file", "1.2 MB"),
    FileItem("config.json", "file", "1.8 KB"),
]


def is_excluded(name: str, patterns: Iterable[str]) -> bool:
    """Match a name against exclude patterns.

    A pattern ending in ``/`` matches the directory and everything under it;
    any other pattern must match the name exactly.
    """
    for pattern in patterns:
        if pattern.endswith("/"):
            if name.startswith(pattern) or name == pattern[:-1]:
                return True
        elif name == pattern:
            return True
    return False


def preview_transfer(
    source: Sequence[FileItem],
    destination: Sequence[FileItem],
    flags: Sequence[str],
    exclude_patterns: Sequence[str] = (),
) -> List[FileItem]:
    """Predict which files the command would touch.

    Files missing on the destination, or files whose size differs, are
    transferred. With ``--delete``, destination-only files are listed with
    size ``DELETED``.
    """
    patterns = list(exclude_patterns) if "--exclude" in flags else []
    dest_by_name = {item.name: item for item in destination}

    transferred = []
    for item in source:
        if is_excluded(item.name, patterns):
            continue
        existing = dest_by_name.get(item.name)
        if existing is None or (existing.size != item.size and item.type == "file"):
            transferred.append(item)

    deleted = []
    if "--delete" in flags:
        source_names = {item.name for item in source}
        deleted = [
            dataclasses.replace(item, size=DELETED)
            for item in destination
            if not is_excluded(item.name, patterns) and item.name not in source_names
        ]

    return transferred + deleted
