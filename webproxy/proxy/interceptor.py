"""
Client-side interceptor script injected into rewritten HTML.

The generated script depends only on the proxy origin, the target URL and
the addressing scheme it is built for. It carries its own copy of the URL
Resolution Rule, emitted from ``RESOLUTION_RULES``, and patches
``fetch``, ``XMLHttpRequest.prototype.open``, ``window.open`` and
optionally ``location.href`` so requests made by page JavaScript go back
through the proxy.
"""

import json

from webproxy.proxy.addressing import AddressingScheme
from webproxy.proxy.resolution import (
    ABSOLUTE,
    ORIGIN_RELATIVE,
    PROTOCOL_RELATIVE,
    RESOLUTION_RULES,
)

# JavaScript counterparts of the resolvers in resolution.py
_JS_RESOLVERS = {
    PROTOCOL_RELATIVE: "TARGET_PROTOCOL + url",
    ORIGIN_RELATIVE: "TARGET_ORIGIN + url",
    ABSOLUTE: "url",
}
_JS_RELATIVE_RESOLVER = "new URL(url, BASE_URL).href"

_LOCATION_OVERRIDE = """
  var knownHref = window.location.href;
  try {
    Object.defineProperty(window.location, "href", {
      get: function () { return knownHref; },
      set: function (url) {
        if (shouldRewrite(url)) {
          window.location.assign(encodeProxyUrl(url));
        }
      }
    });
  } catch (e) {
    // location is not configurable in every browser
  }
"""

_TEMPLATE = """(function () {
  "use strict";
  var PROXY_ORIGIN = %(proxy_origin)s;
  var PROXY_PREFIX = %(proxy_prefix)s;
  var BASE_URL = %(base_url)s;
  var TARGET = new URL(BASE_URL);
  var TARGET_PROTOCOL = TARGET.protocol;
  var TARGET_ORIGIN = TARGET.protocol + "//" + TARGET.host;

  function resolveTargetUrl(url) {
%(resolver_body)s
  }

  function encodeProxyUrl(url) {
    try {
      return PROXY_ORIGIN + PROXY_PREFIX + encodeURIComponent(resolveTargetUrl(url));
    } catch (e) {
      return url;
    }
  }

  function shouldRewrite(url) {
    return typeof url === "string" && url.indexOf("data:") !== 0;
  }

  var originalFetch = window.fetch;
  if (originalFetch) {
    window.fetch = function (input, init) {
      if (shouldRewrite(input)) {
        input = encodeProxyUrl(input);
      }
      return originalFetch.call(this, input, init);
    };
  }

  var originalXHROpen = XMLHttpRequest.prototype.open;
  XMLHttpRequest.prototype.open = function (method, url) {
    var args = Array.prototype.slice.call(arguments);
    if (shouldRewrite(url)) {
      args[1] = encodeProxyUrl(url);
    }
    return originalXHROpen.apply(this, args);
  };

  var originalOpen = window.open;
  window.open = function (url) {
    var args = Array.prototype.slice.call(arguments);
    if (url && shouldRewrite(url)) {
      args[0] = encodeProxyUrl(url);
    }
    return originalOpen.apply(this, args);
  };
%(location_override)s})();
"""


def js_string(value: str) -> str:
    """JSON-quoted string literal that cannot terminate the surrounding <script>."""
    return json.dumps(value).replace("</", "<\\/")


def resolver_source() -> str:
    """Body of ``resolveTargetUrl`` generated from RESOLUTION_RULES."""
    lines = []
    for prefix, kind in RESOLUTION_RULES:
        lines.append(f"    if (url.startsWith({js_string(prefix)})) {{")
        lines.append(f"      return {_JS_RESOLVERS[kind]};")
        lines.append("    }")
    lines.append(f"    return {_JS_RELATIVE_RESOLVER};")
    return "\n".join(lines)


def interceptor_source(proxy_origin: str, base_url: str, scheme: AddressingScheme) -> str:
    """The interceptor as a standalone JavaScript program."""
    return _TEMPLATE % {
        "proxy_origin": js_string(proxy_origin),
        "proxy_prefix": js_string(scheme.prefix),
        "base_url": js_string(base_url),
        "resolver_body": resolver_source(),
        "location_override": _LOCATION_OVERRIDE if scheme.intercepts_location else "",
    }


def interceptor_script(proxy_origin: str, base_url: str, scheme: AddressingScheme) -> str:
    """The interceptor wrapped in a ``<script>`` element for injection."""
    return f"<script>\n{interceptor_source(proxy_origin, base_url, scheme)}</script>\n"
