#!/usr/bin/env python3
"""MultiForge - generate a UI (HTML, CSS, JS) with one or more models.

Usage:
    python main.py generate --prompt "make a red button" --model OpenAI/gpt-4o
    python main.py generate --prompt "..." --model A/m1 --model B/m2       # several models
    python main.py generate --prompt "make it blue" --model A/m1 --prior ui.json
    python main.py generate --prompt "..." --model A/m1 --save out.json   # write final code
    python main.py list-models [--config config.json]
"""

import argparse
import json
import logging
import os
import sys

from config.settings import load_settings
from core.broadcaster import DeltaBroadcaster
from core.errors import ConfigurationError
from core.orchestrator import Orchestrator
from core.state import CodeArtifact, ConversationTurn, ModelDone


def _load_prior(path):
    """Read prior code ({"html", "css", "js"}) from a JSON file."""
    if not path:
        return None
    with open(path) as f:
        return CodeArtifact.from_dict(json.load(f))


def cmd_generate(args):
    """Stream a generation to the terminal."""
    settings = load_settings(args.config)
    orchestrator = Orchestrator(settings)
    models = list(dict.fromkeys(args.model))
    history = [ConversationTurn(role="user", content=args.prompt)]
    prior = _load_prior(args.prior)
    priors = {m: prior for m in models} if prior else None

    broadcaster = DeltaBroadcaster()
    broadcaster.expect(models)
    live = len(models) == 1
    buffers = {m: [] for m in models}
    artifacts = {}
    failed = False

    for event in orchestrator.stream(models, history, priors):
        if isinstance(event, ModelDone):
            artifacts[event.model] = event.artifact.to_dict()
        for payload in broadcaster.publish(event):
            model = payload["model"]
            if payload["type"] == "stageProgress":
                if live:
                    sys.stdout.write(payload["content"])
                    sys.stdout.flush()
                else:
                    buffers[model].append(payload["content"])
            elif payload["type"] == "modelError":
                failed = True
                print(f"\n[ERROR] {model}: {payload['error']}", file=sys.stderr)
            elif payload["type"] == "modelDone" and not live:
                print(f"\n=== {model} ===")
                print("".join(buffers[model]))

    if args.save and artifacts:
        with open(args.save, "w") as f:
            json.dump(artifacts if len(models) > 1 else next(iter(artifacts.values())), f, indent=2)
        print(f"\nSaved code to {args.save}")

    return 1 if failed else 0


def cmd_list_models(args):
    settings = load_settings(args.config)
    providers = settings.registry.list_providers()
    if not providers:
        print("No providers configured.")
        return 0
    for provider in providers:
        print(f"{provider['name']} ({provider['type']})")
        for model in provider["models"]:
            print(f"  {provider['name']}/{model}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="MultiForge - streaming multi-model UI generator"
    )
    parser.add_argument("--config", help="Path to config JSON (default: config.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    gen = sub.add_parser("generate", help="Generate HTML, CSS and JS for a prompt")
    gen.add_argument("--prompt", required=True, help="Describe the UI")
    gen.add_argument("--model", action="append", required=True,
                     help="Provider/model, repeat for several models")
    gen.add_argument("--prior", help="JSON file with existing html/css/js to iterate on")
    gen.add_argument("--save", help="Write the final code to this JSON file")

    sub.add_parser("list-models", help="List configured providers and models")

    args = parser.parse_args()
    level = "DEBUG" if args.verbose else os.environ.get("MULTIFORGE_LOG_LEVEL", "WARNING")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "generate":
            return cmd_generate(args)
        if args.command == "list-models":
            return cmd_list_models(args)
    except ConfigurationError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
