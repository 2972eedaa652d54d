"""CSS and JavaScript minification, delegated to rcssmin and rjsmin.

Their output is trusted as valid CSS/JS and substituted verbatim.
"""

import rcssmin
import rjsmin

_STYLE_WRAPPER_OPEN = "x{"
_STYLE_WRAPPER_CLOSE = "}"


def minify_css(code: str) -> str:
    return rcssmin.cssmin(code, keep_bang_comments=False)


def minify_js(code: str) -> str:
    return rjsmin.jsmin(code, keep_bang_comments=False)


def minify_css_declarations(code: str) -> str:
    """Minify the body of a ``style`` attribute.

    rcssmin works on rules, so the declarations are wrapped in a throwaway
    rule. Anything that does not come back wrapped is returned unchanged.
    """
    minified = minify_css(_STYLE_WRAPPER_OPEN + code + _STYLE_WRAPPER_CLOSE)
    if not (minified.startswith(_STYLE_WRAPPER_OPEN) and minified.endswith(_STYLE_WRAPPER_CLOSE)):
        return code
    return minified[len(_STYLE_WRAPPER_OPEN) : -len(_STYLE_WRAPPER_CLOSE)]
