import os

from charity_api import create_app

app = create_app()

if __name__ == "__main__":
    port = int(os.getenv("PORT", app.config["PORT"]))
    app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

# Local services:
# docker compose --env-file .env.docker up -d
# alembic upgrade head && python scripts/seed.py
# PORT=5050 python run.py   OR   flask --app charity_api:create_app --debug run
