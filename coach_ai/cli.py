"""CLI helpers for Coach AI."""

import argparse
import json
import logging
from pathlib import Path

from .advisor import AdviceService
from .config import log_level
from .context import FinancialContext, build_context, load_transactions
from .errors import NoProviderConfiguredError, ProviderError, UnsupportedProviderError
from .providers import AUTO, Provider


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask Coach AI for financial advice")
    parser.add_argument("question", help="The question to ask")
    parser.add_argument(
        "--context",
        type=Path,
        help="JSON file holding a financial context snapshot",
    )
    parser.add_argument(
        "--transactions",
        type=Path,
        help="CSV of transactions (date, description, amount[, category, type])",
    )
    parser.add_argument(
        "--provider",
        default=AUTO,
        choices=[AUTO] + [provider.value for provider in Provider],
        help="Provider to use (default: auto)",
    )
    parser.add_argument(
        "--fallback",
        action="store_true",
        help="Skip remote providers and answer with local advice",
    )
    return parser.parse_args(argv)


def load_context(args: argparse.Namespace) -> FinancialContext:
    if args.context:
        return FinancialContext.from_mapping(json.loads(args.context.read_text()))
    if args.transactions:
        return build_context(load_transactions(args.transactions))
    return FinancialContext()


def main(argv=None) -> None:
    logging.basicConfig(level=log_level())
    args = parse_args(argv)
    context = load_context(args)
    advisor = AdviceService.from_env()

    print("Coach AI Financial Advice\n=========================")
    if args.fallback:
        print(advisor.generate_fallback(args.question, context))
        return

    try:
        print(advisor.get_financial_advice(args.question, context, args.provider))
    except UnsupportedProviderError as exc:
        raise SystemExit(str(exc)) from exc
    except (NoProviderConfiguredError, ProviderError) as exc:
        if args.provider != AUTO:
            raise SystemExit(str(exc)) from exc
        print(f"[{exc}; showing offline advice]\n")
        print(advisor.generate_fallback(args.question, context))


if __name__ == "__main__":
    main()
