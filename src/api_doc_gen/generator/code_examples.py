"""curl, fetch and axios snippets for the Markdown docs."""

import json
from typing import Any
from urllib.parse import urlencode

_NO_BODY_METHODS = ("GET", "HEAD", "DELETE")
_JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


def _pretty(body: Any) -> str:
    return json.dumps(body, indent=4, ensure_ascii=False)


def _sends_body(method: str, body: Any) -> bool:
    return body is not None and method.upper() not in _NO_BODY_METHODS


def curl(method: str, url: str, headers: dict[str, str] | None = None, body: Any = None, query: dict[str, Any] | None = None) -> str:
    method = method.upper()
    if query:
        url += ("&" if "?" in url else "?") + urlencode(query)
    command = f'curl -X {method} "{url}"'
    for name, value in (headers or {}).items():
        command += f' \\\n  -H "{name}: {value}"'
    if _sends_body(method, body):
        payload = _pretty(body).replace("'", "'\\''")
        command += f" \\\n  -d '{payload}'"
    return command


def _fetch_options(method: str, headers: dict[str, str] | None, body: Any) -> str:
    merged = {**_JSON_HEADERS, **(headers or {})}
    lines = [f"  method: '{method}',", "  headers: {"]
    lines.append(",\n".join(f"    '{name}': '{value}'" for name, value in merged.items()))
    options = "\n".join(lines) + "\n  }"
    if _sends_body(method, body):
        indented = "\n".join("  " + line for line in _pretty(body).splitlines())
        options += ",\n  body: JSON.stringify(" + indented.strip() + ")"
    return options


def fetch(method: str, url: str, headers: dict[str, str] | None = None, body: Any = None, use_async: bool = True) -> str:
    method = method.upper()
    options = _fetch_options(method, headers, body)
    if use_async:
        return (
            f"const response = await fetch('{url}', {{\n{options}\n}});\n\n"
            "const data = await response.json();\n"
            "console.log(data);"
        )
    return (
        f"fetch('{url}', {{\n{options}\n}})\n"
        "  .then(response => response.json())\n"
        "  .then(data => console.log(data))\n"
        "  .catch(error => console.error('Error:', error));"
    )


def axios(method: str, url: str, headers: dict[str, str] | None = None, body: Any = None) -> str:
    code = f"const response = await axios.{method.lower()}('{url}'"
    if body is not None and method.upper() in ("POST", "PUT", "PATCH"):
        code += ", " + _pretty(body)
    if headers:
        header_lines = ",\n".join(f"    '{name}': '{value}'" for name, value in headers.items())
        code += ", {\n  headers: {\n" + header_lines + "\n  }\n}"
    return code + ");\n\nconsole.log(response.data);"
