"""Canned upstream outcomes for tracker tests."""

from shared.upstream import ErrorKind, Failure, Success


def ok(value, status_code=200) -> Success:
    return Success(value=value, status_code=status_code)


def network_failure(message="Connection refused") -> Failure:
    return Failure(error_kind=ErrorKind.NETWORK, message=message)


def upstream_failure(message="HTTP 500", status_code=500) -> Failure:
    return Failure(error_kind=ErrorKind.UPSTREAM, message=message, status_code=status_code)


def game(game_id, name, **fields) -> dict:
    return {"id": game_id, "name": name, **fields}


def play(play_id, game_id="g1", date="2024-06-01", **fields) -> dict:
    return {"id": play_id, "gameId": game_id, "date": date, **fields}
