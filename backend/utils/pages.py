# backend/utils/pages.py
"""HTML pages served outside the proxy pipeline."""

from flask import render_template_string

SETUP_PAGE = """<!DOCTYPE html>
<html lang="en"><head><meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>First-time setup</title>
<style>
body{font-family:system-ui,Segoe UI,Arial;max-width:720px;margin:60px auto;padding:0 16px;color:#222}
h1{font-size:22px;margin-bottom:16px}label{display:block;margin-bottom:6px;color:#444}
input{padding:10px;border:1px solid #ccc;border-radius:6px;width:100%;font-size:15px}
button{margin-top:12px;padding:10px 14px;border:0;border-radius:6px;background:#0b76ef;color:#fff;cursor:pointer}
.tip{color:#666;margin-top:10px;font-size:13px}.error{color:#b00020}
</style></head><body>
<h1>Choose the secure path</h1>
{% if error %}<p class="error">{{ error }}</p>{% endif %}
<form method="POST">
<label for="secure_path">Secure path (letters, digits and '-', at least 6 characters):</label>
<input id="secure_path" name="secure_path" pattern="[A-Za-z0-9-]{6,64}" required placeholder="e.g. portal-abc123">
<button type="submit">Save</button>
</form>
<div class="tip">Afterwards the home page shows the stock nginx welcome page and the proxy
is only reachable at /&lt;secure path&gt;. The path is not linked from anywhere.</div>
</body></html>
"""

DECOY_PAGE = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Welcome to nginx!</title>
<style>body{width:35em;margin:0 auto;font-family:Tahoma,Verdana,Arial,sans-serif;color:#000}h1{color:#000}</style>
</head><body>
<h1>Welcome to nginx!</h1>
<p>If you see this page, the nginx web server is successfully installed and working. Further configuration is required.</p>
<p>For online documentation and support please refer to <a href="http://nginx.org/">nginx.org</a>.<br/>
Commercial support is available at <a href="http://nginx.com/">nginx.com</a>.</p>
<p><em>Thank you for using nginx.</em></p>
</body></html>
"""

ENTRY_FORM_PAGE = """<!DOCTYPE html>
<html lang="en"><head><meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Entry</title>
<style>
body{font-family:system-ui,Segoe UI,Arial;max-width:720px;margin:40px auto;padding:0 16px;color:#222}
h1{font-size:18px;margin-bottom:12px}.tip{color:#666;margin-top:10px;font-size:13px}
input[type=url]{width:100%;padding:10px;border:1px solid #ccc;border-radius:6px}
button{margin-top:10px;padding:10px 14px;border:0;border-radius:6px;background:#0b76ef;color:#fff;cursor:pointer}
</style></head><body>
<h1>Proxy entry</h1>
<form method="POST"><input type="url" name="url" placeholder="https://example.com" required>
<button type="submit">Go</button></form>
<div class="tip">Links in fetched pages are rewritten to keep browsing through this entry.</div>
</body></html>
"""


def render_setup_page(error: str = "") -> str:
    return render_template_string(SETUP_PAGE, error=error)


def render_decoy_page() -> str:
    return render_template_string(DECOY_PAGE)


def render_entry_form() -> str:
    return render_template_string(ENTRY_FORM_PAGE)
