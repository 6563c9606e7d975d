"""Development server with demo data loaded on first start."""

import os
import sys

if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")

os.environ.setdefault("GARDEN_SEED_DEMO_DATA", "true")
os.environ.setdefault("GARDEN_DATABASE_PATH", "database/garden.db")

from app import create_app, socketio

app = create_app(bootstrap_runtime=True)

port = int(os.environ.get("PORT", 5000))

print(f"Server starting on http://0.0.0.0:{port}")
print("Press Ctrl+C to stop\n")

if __name__ == "__main__":
    try:
        socketio.run(
            app,
            host="0.0.0.0",
            port=port,
            debug=False,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
    except KeyboardInterrupt:
        print("\nServer stopped by user")
