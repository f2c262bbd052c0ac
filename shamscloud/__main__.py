# __main__.py
import asyncio
from uvicorn import Config, Server
from tortoise import Tortoise
from .app import create_app
from .globals import logger
from . import config

MODELS = {"models": ["shamscloud.models"]}

app = create_app()

async def main():
    try:
        await Tortoise.init(db_url=config.Database.URL, modules=MODELS)
        await Tortoise.generate_schemas()
        await app.state.auth.ensure_admin(config.Auth.ADMIN_EMAIL, config.Auth.ADMIN_PASSWORD)
        conf = Config(app=app, host=config.Network.HOST, port=config.Network.PORT, timeout_keep_alive=120)
        server = Server(conf)
        logger.info(f"Serving on {config.Network.HOST}:{config.Network.PORT}, database {config.Database.URL.split('://')[0]}")
        await server.serve()
    except Exception as e:
        logger.error(f"Main application error: {e}", exc_info=True)
    finally:
        await Tortoise.close_connections()

def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("Server shutting down.")

if __name__ == "__main__":
    run()
