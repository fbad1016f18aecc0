"""
uid/gid to name resolution from passwd- and group-style map files.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from ..validation import ErrorSeverity, handle_file_error

logger = logging.getLogger(__name__)


def load_name_table(map_path: Union[str, Path], description: str = "map file") -> Dict[int, str]:
    """
    Read a colon-delimited map file into an id -> name table.

    Field 1 is the name and field 3 the numeric id. Lines with fewer than
    three fields or a non-numeric id are skipped; a later line for the same
    id replaces an earlier one. A missing or unreadable file yields an empty
    table.
    """
    table: Dict[int, str] = {}
    try:
        with open(map_path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                fields = line.rstrip("\n").split(":")
                if len(fields) < 3:
                    continue
                try:
                    table[int(fields[2])] = fields[0]
                except ValueError:
                    continue
    except OSError as e:
        handle_file_error(
            error=e,
            context=f"reading {description} {map_path}; ids will be shown numerically",
            severity=ErrorSeverity.WARNING,
            reraise=False,
            logger=logger,
        )
        return {}

    logger.info(f"Loaded {len(table)} entries from {description} {map_path}")
    return table


class NameResolver:
    """
    Resolves credentials to display names using preloaded tables.

    When disabled, resolve() returns the decimal id and load() never opens
    the map files.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.users: Dict[int, str] = {}
        self.groups: Dict[int, str] = {}

    def load(self, passwd_map_path: Optional[Union[str, Path]],
             group_map_path: Optional[Union[str, Path]]) -> None:
        if not self.enabled:
            logger.debug("Name resolution disabled, map files not loaded")
            return
        if passwd_map_path is not None:
            self.users = load_name_table(passwd_map_path, "passwd map")
        if group_map_path is not None:
            self.groups = load_name_table(group_map_path, "group map")

    def resolve(self, credential: int, is_group_view: bool = False) -> str:
        if not self.enabled:
            return str(credential)
        table = self.groups if is_group_view else self.users
        return table.get(credential, str(credential))
