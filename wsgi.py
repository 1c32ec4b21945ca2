# wsgi.py - entry point for gunicorn (`gunicorn wsgi:app`) and local dev
import os

from app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=os.getenv("FLASK_DEBUG", "0") == "1", port=int(os.getenv("PORT", "5000")))
