import argparse
import logging
import sys

from price_pulse.app import PricePulseApp, run_quotes
from price_pulse.config.schema import load_config
from price_pulse.notifiers.telegram import TelegramNotifier
from price_pulse.telegram.bot import TelegramTransport

logger = logging.getLogger(__name__)


def run_bot(config) -> None:
    token = config.telegram.require_token()
    app = PricePulseApp(config)
    transport = TelegramTransport(token, app.router, on_startup=app.start, on_shutdown=app.stop)
    app.attach_notifier(TelegramNotifier(transport.bot, send_timeout_s=config.telegram.send_timeout_s))
    transport.run()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Price Pulse Telegram price digest bot")
    parser.add_argument("command", choices=["run", "quotes"], help="run the bot, or fetch and print current prices once")
    parser.add_argument("--config", default=None, help="Path to optional YAML config file")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")

    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(name)s - %(message)s")

    try:
        config = load_config(args.config)
        if args.command == "run":
            run_bot(config)
        elif args.command == "quotes":
            lines = run_quotes(config)
            for line in lines.values():
                print(line)
                print()
    except RuntimeError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
