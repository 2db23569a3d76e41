import pytest

from gateway.server.proxy import http_status_for, result_response
from shared.upstream import ErrorKind, Failure, Success


@pytest.mark.parametrize(
    ("result", "created", "expected"),
    [
        (Success(value={}, status_code=200), False, 200),
        (Success(value={}, status_code=200), True, 201),
        (Success(value=None, status_code=204), False, 200),
        (Failure(ErrorKind.UPSTREAM, "HTTP 404: Game not found", 404), False, 404),
        (Failure(ErrorKind.UPSTREAM, "HTTP 409", 409), True, 409),
        (Failure(ErrorKind.UPSTREAM, "HTTP 503", 503), False, 503),
        (Failure(ErrorKind.UPSTREAM, "HTTP 302", 302), False, 502),
        (Failure(ErrorKind.NETWORK, "Connection refused"), False, 502),
        (Failure(ErrorKind.MALFORMED, "Malformed response body (HTTP 200)", 200), False, 502),
    ],
)
def test_http_status_for(result, created, expected):
    assert http_status_for(result, created=created) == expected


def test_envelope_status_matches_http_status():
    response = result_response(Failure(ErrorKind.NETWORK, "Connection refused"))

    assert response.status_code == 502
    assert response.body == b'{"success":false,"data":null,"error":"Connection refused","status":502}'


def test_created_envelope():
    response = result_response(Success(value={"id": "g1"}, status_code=200), created=True)

    assert response.status_code == 201
    assert response.body == b'{"success":true,"data":{"id":"g1"},"error":null,"status":201}'
