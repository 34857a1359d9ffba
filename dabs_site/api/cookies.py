from __future__ import annotations

from typing import Iterable

from fastapi import Response

from dabs_site.services.cookies import CookieChange


def apply_cookie_changes(response: Response, changes: Iterable[CookieChange]) -> None:
    for change in changes:
        if change.is_deletion:
            response.delete_cookie(change.name, path="/")
        else:
            response.set_cookie(
                change.name,
                change.value,
                max_age=change.max_age,
                path="/",
                samesite="strict",
            )
