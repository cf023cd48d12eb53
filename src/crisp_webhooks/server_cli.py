"""CLI entry point for the webhook receiver server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="crisp-webhooks-server",
        description="Crisp WebHook receiver",
    )
    parser.add_argument("--host", default=None, help="Bind host (default: CRISP_WEBHOOKS_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: CRISP_WEBHOOKS_PORT or 8080)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: accept plain HTTP requests, console logs",
    )
    parser.add_argument("--config-file", default=None, help="JSON file holding WebHooks:*:SecretKey:* entries")
    args = parser.parse_args(argv)

    # Settings are read from the environment when crisp_webhooks.main is imported
    if args.local:
        os.environ["CRISP_WEBHOOKS_LOCAL_MODE"] = "1"
        os.environ.setdefault("CRISP_WEBHOOKS_JSON_LOGS", "0")
    if args.config_file:
        os.environ["CRISP_WEBHOOKS_CONFIG_FILE"] = args.config_file

    import uvicorn

    from crisp_webhooks.config import Settings

    settings = Settings()
    uvicorn.run(
        "crisp_webhooks.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        proxy_headers=True,
        log_config=None,
    )


if __name__ == "__main__":
    main()
