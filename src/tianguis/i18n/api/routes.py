"""FastAPI routes exposing the locale routing table."""

from fastapi import APIRouter, HTTPException

from tianguis.i18n.routing import UnknownLocale, UnknownRoute, localize_path, resolve_path, routing_table

router = APIRouter(prefix="/i18n", tags=["i18n"])


@router.get("/routes")
async def routes() -> dict:
    return routing_table()


@router.get("/resolve")
async def resolve(path: str) -> dict:
    resolved = resolve_path(path)
    if resolved is None:
        return {"path": path, "resolved": False}
    locale, key, params = resolved
    return {"path": path, "resolved": True, "locale": locale, "key": key, "params": params}


@router.get("/localize/{key}")
async def localize(key: str, locale: str = "es") -> dict:
    try:
        return {"key": key, "locale": locale, "path": localize_path(key, locale)}
    except (UnknownLocale, UnknownRoute, KeyError):
        raise HTTPException(status_code=404, detail=f"No route '{key}' for locale '{locale}'") from None
