"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""


def route_not_using_db(func):
    """
    Decorator to mark a route handler as not requiring database access.

    When applied, this sets an internal attribute `_no_db = True` on the
    function. The accounts service ``before_request`` hook checks it and
    skips acquiring a pooled connection for the request.

    Args:
        func (Callable): The route handler function to decorate.

    Returns:
        Callable: The same function with the `_no_db` attribute set.
    """
    func._no_db = True
    return func
