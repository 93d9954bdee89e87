#!/usr/bin/env python3
"""
Push a bracket snapshot to a running layout API.

Reads a snapshot file (YAML or JSON), POSTs it to the view's snapshot
endpoint and prints the changes the server computed against what the
view showed before.

Usage:
    python scripts/push_snapshot.py data/sample_bracket.yaml
    python scripts/push_snapshot.py snapshot.json --view stage-left --url http://localhost:5000

Exit codes:
    0: Success
    1: Snapshot file could not be read
    2: Server unreachable
    3: Server rejected the snapshot
"""
import argparse
import json
import os
import sys

import requests
import yaml

DEFAULT_URL = os.environ.get('BRACKET_API_URL', 'http://localhost:5000')


def read_snapshot(file_path):
    """Load a snapshot file into a dict."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        if file_path.lower().endswith('.json'):
            return json.load(file)
        return yaml.safe_load(file)


def push_snapshot(base_url, view_id, snapshot, timeout=10):
    """POST a snapshot to a view; returns the requests response."""
    url = f"{base_url.rstrip('/')}/api/views/{view_id}/snapshot"
    return requests.post(url, json=snapshot, timeout=timeout)


def print_result(payload):
    if payload.get('full_rebuild'):
        print("Full rebuild")
    changes = [a for a in payload.get('actions', []) if a['kind'] == 'update']
    for action in changes:
        print(f"  {action['id']} {action['field']}: {action['old_value']} -> {action['new_value']}")
    summary = payload.get('summary', {})
    print(f"Summary: {summary.get('enter', 0)} enter, {summary.get('update', 0)} update, "
          f"{summary.get('unchanged', 0)} unchanged, {summary.get('exit', 0)} exit")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Push a bracket snapshot to the layout API.')
    parser.add_argument('snapshot', help='Snapshot file (YAML or JSON)')
    parser.add_argument('--view', default='default', help='View id on the server (default: default)')
    parser.add_argument('--url', default=DEFAULT_URL, help=f'API base URL (default: {DEFAULT_URL})')
    args = parser.parse_args(argv)

    try:
        snapshot = read_snapshot(args.snapshot)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: failed to read {args.snapshot}: {e}", file=sys.stderr)
        return 1

    try:
        response = push_snapshot(args.url, args.view, snapshot)
    except requests.exceptions.ConnectionError:
        print(f"Error: could not connect to {args.url}. Is the app running?", file=sys.stderr)
        return 2

    if response.status_code != 200:
        try:
            error = response.json().get('error', response.text)
        except ValueError:
            error = response.text
        print(f"Error ({response.status_code}): {error}", file=sys.stderr)
        return 3

    print_result(response.json())
    return 0


if __name__ == '__main__':
    sys.exit(main())
