# scip-finder - SCIP symbol search with MCP server
# Copyright (C) 2026 The scip-finder Authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""SCIP symbol role bitmask helpers.

Roles combine with bitwise OR, e.g. ``DEFINITION | EXPORT``.
"""

DEFINITION = 0x1
REFERENCE = 0x2
IMPORT = 0x4
EXPORT = 0x8

_ROLE_NAMES: dict[int, str] = {
    DEFINITION: "Definition",
    REFERENCE: "Reference",
    IMPORT: "Import",
    EXPORT: "Export",
}


def get_role_name(role: int) -> str:
    """Name of a single role bit, or "Unknown"."""
    return _ROLE_NAMES.get(role, "Unknown")


def get_role_names(roles: int) -> list[str]:
    """Names of every recognised bit set in ``roles``, lowest bit first."""
    return [name for bit, name in _ROLE_NAMES.items() if roles & bit]


def is_definition(roles: int) -> bool:
    return (roles & DEFINITION) != 0


def is_reference(roles: int) -> bool:
    return (roles & REFERENCE) != 0


def is_import(roles: int) -> bool:
    return (roles & IMPORT) != 0


def is_export(roles: int) -> bool:
    return (roles & EXPORT) != 0
