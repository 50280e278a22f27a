from fastapi import Request

from aeinfo.services.platform import Platform


def get_platform(request: Request) -> Platform:
    return request.app.state.platform
