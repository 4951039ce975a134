"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""

# (major, minor, patch, pre-release or None)
VERSION_INFO = (0, 1, 0, "beta")


def _format_version(major: int, minor: int, patch: int,
                    pre_release=None) -> str:
    version = f"V{major}.{minor}.{patch}"
    return f"{version}-{pre_release}" if pre_release else version


__version__ = _format_version(*VERSION_INFO)
