#!/usr/bin/env python3
"""
Render a bracket snapshot file to a layout document.

Usage:
    python src/render_bracket.py data/sample_bracket.yaml
    python src/render_bracket.py new.yaml --previous old.yaml
    python src/render_bracket.py new.json --config data/layout.yaml --output layout.json

Exit codes:
    0: Success
    1: Snapshot or settings file could not be read
    2: Bracket could not be laid out
"""
import argparse
import json
import os
import sys

import yaml

from engine.config import load_layout_settings
from engine.errors import BracketError, LayoutConfigError
from engine.models import Bracket
from engine.reconcile import changed_actions
from engine.renderer import BracketRenderer


def load_snapshot(file_path):
    """Load a bracket snapshot from a YAML or JSON file."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        if file_path.lower().endswith('.json'):
            data = json.load(file)
        else:
            data = yaml.safe_load(file)
    return Bracket.from_dict(data)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Lay out a bracket snapshot and print it as JSON.')
    parser.add_argument('snapshot', help='Bracket snapshot file (YAML or JSON)')
    parser.add_argument('--previous', help='Earlier snapshot of the same view; prints the changes against it')
    parser.add_argument('--config', help='Layout settings YAML file (defaults are used when omitted)')
    parser.add_argument('--output', help='Write the layout document here instead of stdout')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        settings = load_layout_settings(args.config)
        bracket = load_snapshot(args.snapshot)
        previous = load_snapshot(args.previous) if args.previous else None
    except (OSError, ValueError, yaml.YAMLError, LayoutConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except BracketError as e:
        print(f"Error: invalid snapshot: {e}", file=sys.stderr)
        return 1

    renderer = BracketRenderer(settings)
    try:
        if previous is not None:
            renderer.set_data(previous)
        result = renderer.set_data(bracket)
    except BracketError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    document = json.dumps(result['layout'], indent=2)
    if args.output:
        output_dir = os.path.dirname(os.path.abspath(args.output))
        os.makedirs(output_dir, exist_ok=True)
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(document + '\n')
        print(f"Layout written to {args.output}")
    else:
        print(document)

    if previous is not None:
        print("\n--- Changes ---")
        if result['full_rebuild']:
            print("Full rebuild (different group, round or view)")
        changes = changed_actions(result)
        if changes:
            for action in changes:
                print(f"  {action['id']} {action['field']}: {action['old_value']} -> {action['new_value']}")
        else:
            print("  No text changed.")
        summary = result['summary']
        print(f"Summary: {summary['enter']} enter, {summary['update']} update, "
              f"{summary['unchanged']} unchanged, {summary['exit']} exit")

    return 0


if __name__ == '__main__':
    sys.exit(main())
