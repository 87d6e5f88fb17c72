"""Locale routing table for storefront paths.

Spanish is the default locale and is served without a prefix (``/productos``);
an explicit ``/es`` prefix is accepted on the way in. Every other locale is
always prefixed (``/en/products``). Segments in braces are parameters.
"""

import re

DEFAULT_LOCALE = "es"
LOCALES = ("es", "en")

ROUTES: dict[str, dict[str, str]] = {
    "home": {"es": "/", "en": "/"},
    "products": {"es": "/productos", "en": "/products"},
    "product": {"es": "/productos/{id}", "en": "/products/{id}"},
    "categories": {"es": "/categorias", "en": "/categories"},
    "category": {"es": "/categorias/{slug}", "en": "/categories/{slug}"},
    "search": {"es": "/buscar", "en": "/search"},
    "cart": {"es": "/carrito", "en": "/cart"},
    "checkout": {"es": "/pago", "en": "/checkout"},
    "checkout_success": {"es": "/pago/exito", "en": "/checkout/success"},
    "order_lookup": {"es": "/pedidos/buscar", "en": "/orders/lookup"},
    "orders": {"es": "/mis-pedidos", "en": "/my-orders"},
    "login": {"es": "/iniciar-sesion", "en": "/login"},
    "register": {"es": "/registro", "en": "/register"},
    "account": {"es": "/cuenta", "en": "/account"},
    "vendor_register": {"es": "/vender", "en": "/sell"},
    "vendor_dashboard": {"es": "/vendedor", "en": "/vendor"},
    "admin": {"es": "/admin", "en": "/admin"},
    "about": {"es": "/nosotros", "en": "/about"},
    "contact": {"es": "/contacto", "en": "/contact"},
    "terms": {"es": "/terminos", "en": "/terms"},
    "privacy": {"es": "/privacidad", "en": "/privacy"},
}

_PARAM = re.compile(r"\{(\w+)\}")


class UnknownLocale(ValueError):
    pass


class UnknownRoute(KeyError):
    pass


def localize_path(key: str, locale: str = DEFAULT_LOCALE, **params) -> str:
    if locale not in LOCALES:
        raise UnknownLocale(locale)
    if key not in ROUTES:
        raise UnknownRoute(key)

    path = _PARAM.sub(lambda m: str(params[m.group(1)]), ROUTES[key][locale])
    if locale == DEFAULT_LOCALE:
        return path
    return f"/{locale}" if path == "/" else f"/{locale}{path}"


def _pattern(template: str) -> re.Pattern:
    return re.compile("^" + _PARAM.sub(r"(?P<\1>[^/]+)", re.escape(template).replace(r"\{", "{").replace(r"\}", "}")) + "$")


_MATCHERS = [
    (key, locale, _pattern(template)) for key, templates in ROUTES.items() for locale, template in templates.items()
]


def _split_locale(path: str) -> tuple[str, str]:
    segments = path.split("/", 2)
    if len(segments) > 1 and segments[1] in LOCALES:
        rest = "/" + segments[2] if len(segments) > 2 else "/"
        return segments[1], rest
    return DEFAULT_LOCALE, path


def resolve_path(path: str) -> tuple[str, str, dict] | None:
    """Map a storefront path to ``(locale, key, params)``, or None when unknown."""
    if not path:
        return None
    path = "/" + path.strip("/") if path != "/" else "/"
    locale, rest = _split_locale(path)

    for key, route_locale, pattern in _MATCHERS:
        if route_locale != locale:
            continue
        match = pattern.match(rest)
        if match:
            return locale, key, match.groupdict()
    return None


def routing_table() -> dict:
    return {
        "default_locale": DEFAULT_LOCALE,
        "locales": list(LOCALES),
        "routes": {
            key: {locale: localize_path(key, locale) for locale in LOCALES}
            for key, templates in ROUTES.items()
            if not _PARAM.search(templates[DEFAULT_LOCALE])
        },
        "patterns": ROUTES,
    }
