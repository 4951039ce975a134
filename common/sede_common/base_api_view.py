"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import typing
import quart


class BaseApiView:
    """
    Helpers shared by the API views of a service.

    Every response body has the shape ``{"message": ..., "data": ...}``,
    where ``data`` is omitted when there is nothing to return.
    """
    # pylint: disable=too-few-public-methods

    @staticmethod
    async def _get_json_body() -> typing.Optional[dict]:
        """
        Return the request body parsed as a JSON object, or None when the
        body is missing, is not JSON or is not an object.
        """
        data = await quart.request.get_json(silent=True)
        return data if isinstance(data, dict) else None

    @staticmethod
    def _json_response(status: HTTPStatus,
                       data: typing.Any = None,
                       message: typing.Optional[str] = None
                       ) -> quart.Response:
        body: dict = {"message": message or status.phrase}
        if data is not None:
            body["data"] = data

        response = quart.jsonify(body)
        response.status_code = status
        return response
