"""
HTML pages for viewing pastes, error states, and the create form.
"""
from typing import Optional

_BASE_STYLE = """
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            min-height: 100vh;
            display: flex;
            align-items: center;
            justify-content: center;
            padding: 20px;
        }
        .container {
            background: white;
            border-radius: 10px;
            box-shadow: 0 10px 40px rgba(0, 0, 0, 0.3);
            max-width: 900px;
            width: 100%;
            padding: 40px;
        }
        h1 {
            color: #333;
            margin-bottom: 10px;
            font-size: 24px;
        }
        .meta {
            color: #666;
            font-size: 12px;
            margin-bottom: 30px;
            font-family: monospace;
            word-break: break-all;
        }
        .content {
            background: #f5f5f5;
            border: 1px solid #ddd;
            border-radius: 5px;
            padding: 20px;
            font-family: "Courier New", monospace;
            font-size: 14px;
            line-height: 1.6;
            max-height: 500px;
            overflow-y: auto;
            white-space: pre-wrap;
            word-wrap: break-word;
            color: #333;
        }
        .footer {
            margin-top: 20px;
            text-align: center;
            color: #999;
            font-size: 12px;
        }
        a {
            color: #667eea;
            text-decoration: none;
        }
        .status {
            text-align: center;
        }
        .status h1 {
            font-size: 48px;
            color: #667eea;
            margin-bottom: 20px;
        }
        .status p {
            color: #666;
            font-size: 16px;
            margin-bottom: 30px;
            line-height: 1.6;
        }
        textarea, input {
            width: 100%;
            padding: 10px;
            margin-bottom: 15px;
            border: 1px solid #ddd;
            border-radius: 5px;
            font-family: "Courier New", monospace;
        }
        button {
            background: #667eea;
            color: white;
            border: none;
            padding: 12px 30px;
            border-radius: 5px;
            font-weight: 600;
            cursor: pointer;
        }
"""


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters."""
    return (
        text
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


def _layout(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape_html(title)} - Pastebin</title>
    <style>{_BASE_STYLE}    </style>
</head>
<body>
    <div class="container">
{body}
    </div>
</body>
</html>"""


def render_paste_page(
    paste_id: str,
    content: str,
    remaining: Optional[int] = None,
    expires_at: Optional[str] = None,
    home_url: str = "/",
) -> str:
    """Render paste content; everything user-supplied is escaped."""
    meta = [f"ID: {escape_html(paste_id)}"]
    if remaining is not None:
        meta.append(f"Views left: {remaining}")
    if expires_at is not None:
        meta.append(f"Expires: {escape_html(expires_at)}")
    meta_line = " &middot; ".join(meta)

    body = f"""        <h1>Pastebin</h1>
        <div class="meta">{meta_line}</div>
        <div class="content">{escape_html(content)}</div>
        <div class="footer">
            <p><a href="{escape_html(home_url)}">Create a new paste</a></p>
        </div>"""
    return _layout("Paste", body)


def render_not_found_page(home_url: str = "/") -> str:
    """Render the 404 page shared by every unavailable paste."""
    body = f"""        <div class="status">
            <h1>404</h1>
            <p>
                This paste was not found, has expired, or its view limit has been exceeded.
            </p>
            <a href="{escape_html(home_url)}">Create a new paste</a>
        </div>"""
    return _layout("Not Found", body)


def render_error_page(home_url: str = "/") -> str:
    """Render the 500 page shown on storage failures."""
    body = f"""        <div class="status">
            <h1>500</h1>
            <p>Something went wrong on our side. Please try again later.</p>
            <a href="{escape_html(home_url)}">Create a new paste</a>
        </div>"""
    return _layout("Error", body)


def render_create_page() -> str:
    """Render the built-in form for creating a paste."""
    body = """        <h1>Pastebin</h1>
        <div class="meta">Share text with an optional expiry and view limit.</div>
        <form id="paste-form">
            <textarea name="content" rows="12" placeholder="Content goes here..." required></textarea>
            <input name="ttl_seconds" type="number" min="1" placeholder="Expiry in seconds (optional)">
            <input name="max_views" type="number" min="1" placeholder="Max views (optional)">
            <button type="submit">Create paste</button>
        </form>
        <div class="footer" id="result"></div>
        <script>
            document.getElementById("paste-form").addEventListener("submit", async (event) => {
                event.preventDefault();
                const form = event.target;
                const payload = { content: form.content.value };
                if (form.ttl_seconds.value) payload.ttl_seconds = parseInt(form.ttl_seconds.value, 10);
                if (form.max_views.value) payload.max_views = parseInt(form.max_views.value, 10);
                const result = document.getElementById("result");
                const response = await fetch("/api/pastes", {
                    method: "POST",
                    headers: { "Content-Type": "application/json" },
                    body: JSON.stringify(payload),
                });
                const data = await response.json();
                result.textContent = response.ok ? data.url : data.error;
            });
        </script>"""
    return _layout("Create", body)
