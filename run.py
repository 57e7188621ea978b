"""Development runner.
Usage: python run.py  (reads .env if present)
Run tools/init_db.py first to create tables and seed roles.
"""

from __future__ import annotations

from dotenv import load_dotenv

from catalog import create_app

load_dotenv()

app = create_app()

if __name__ == "__main__":  # pragma: no cover
    import os
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))
    app.run(debug=True, host=host, port=port)
