#!/usr/bin/env python3
"""
CLI for PropLens

Usage:
    python -m proplens.cli serve
    python -m proplens.cli init-db
    python -m proplens.cli seed --listings 50 --trends 30
    python -m proplens.cli run-agent market-analyzer "How is the Austin, TX market trending?"
    python -m proplens.cli health
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from .config.settings import Settings
from .container import build_container
from .database.sample_data import seed_sample_data
from .exceptions import AgentNotFound
from .utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


class PropLensCLI:
    """Command-line interface over the service container"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.container = build_container(settings)

    async def init_db(self) -> None:
        await self.container.start(create_tables=True)
        print("✅ Database tables created")

    async def seed(self, listings: int, trends: int, seed: int = None) -> None:
        await self.container.start(create_tables=True)
        inserted = await seed_sample_data(self.container.repository, listings, trends, seed)
        print(f"✅ Inserted {inserted['listings']} listings and {inserted['market_trends']} market trends")

    async def run_agent(self, agent_key: str, prompt: str) -> None:
        await self.container.start()
        try:
            text = await self.container.runner.run_agent(agent_key, prompt)
        except AgentNotFound as e:
            print(f"❌ {e}")
            print(f"Available agents: {', '.join(self.container.agents.keys())}")
            sys.exit(1)
        print(text)

    async def health(self) -> None:
        await self.container.start()
        status = await self.container.db.health_check()
        status['providers'] = {b.provider_id: b.has_credential for b in self.container.providers.bindings()}
        print(json.dumps(status, indent=2))

    async def close(self) -> None:
        await self.container.close()


async def run_command(cli: PropLensCLI, args) -> None:
    try:
        if args.command == "init-db":
            await cli.init_db()
        elif args.command == "seed":
            await cli.seed(args.listings, args.trends, args.seed)
        elif args.command == "run-agent":
            await cli.run_agent(args.agent, args.prompt)
        elif args.command == "health":
            await cli.health()
    finally:
        await cli.close()


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="PropLens real estate analytics")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    subparsers.add_parser("init-db", help="Create database tables")

    seed = subparsers.add_parser("seed", help="Insert random sample listings and market trends")
    seed.add_argument("--listings", type=int, default=50)
    seed.add_argument("--trends", type=int, default=30)
    seed.add_argument("--seed", type=int, default=None)

    run_agent = subparsers.add_parser("run-agent", help="Run one agent with a prompt")
    run_agent.add_argument("agent")
    run_agent.add_argument("prompt")

    subparsers.add_parser("health", help="Check database and provider configuration")

    args = parser.parse_args()
    settings = Settings()
    configure_logging(json_logs=settings.LOG_JSON, debug=settings.DEBUG)

    if args.command == "serve":
        import uvicorn
        from .api.app import create_app

        uvicorn.run(
            create_app(settings),
            host=args.host or settings.API_HOST,
            port=args.port or settings.API_PORT,
        )
        return

    try:
        asyncio.run(run_command(PropLensCLI(settings), args))
    except KeyboardInterrupt:
        print("\n⏹️  Interrupted")
    except Exception as e:
        logger.error("cli_command_failed", command=args.command, error=str(e))
        print(f"❌ {args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
