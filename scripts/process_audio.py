#!/usr/bin/env python3
# =============================================================================
# scripts/process_audio.py - Process a Recording from the Terminal
# =============================================================================
# Logs in, uploads an audio file, polls until processing finishes and
# prints the report.
#
# Usage:
#   python scripts/process_audio.py meeting.mp3
#   python scripts/process_audio.py interview.m4a --analysis meeting --summary bullet_points
#
# Environment (.env is loaded):
#   LIVEPROMPT_API_URL   API base URL (default http://localhost:4000/api)
#   LIVEPROMPT_EMAIL     Account email
#   LIVEPROMPT_PASSWORD  Account password
# =============================================================================

import argparse
import json
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from client import ApiError, LivePromptClient, PollingTimeoutError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upload and analyze an audio file")
    parser.add_argument("file", help="Path to the audio file")
    parser.add_argument(
        "--analysis",
        choices=["comprehensive", "meeting"],
        default="comprehensive",
        help="Analysis structure (default: comprehensive)",
    )
    parser.add_argument(
        "--summary",
        choices=["executive", "detailed", "bullet_points"],
        default="executive",
        help="Summary style (default: executive)",
    )
    parser.add_argument("--interval", type=float, default=10.0, help="Seconds between status checks")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")
    parser.add_argument(
        "--api-url",
        default=os.getenv("LIVEPROMPT_API_URL", "http://localhost:4000/api"),
    )
    return parser.parse_args()


def print_report(job: dict) -> None:
    report = job.get("report_data") or {}
    metadata = report.get("metadata") or {}

    print()
    print("=" * 70)
    print(report.get("title") or f"Analysis Report: {job.get('filename')}")
    print("=" * 70)
    print(f"Duration: {metadata.get('duration')}s   Speakers: {metadata.get('speakers_count')}")
    print()
    print("SUMMARY")
    print(report.get("executive_summary") or "(none)")

    key_points = report.get("key_points") or []
    if key_points:
        print()
        print("KEY POINTS")
        for point in key_points:
            print(f"  - {point}")

    action_items = report.get("action_items") or []
    if action_items:
        print()
        print("ACTION ITEMS")
        for item in action_items:
            assignee = f" ({item['assignee']})" if item.get("assignee") else ""
            print(f"  [{item.get('priority', 'medium')}] {item['task']}{assignee}")


def main() -> int:
    args = parse_args()

    email = os.getenv("LIVEPROMPT_EMAIL")
    password = os.getenv("LIVEPROMPT_PASSWORD")
    if not email or not password:
        print("ERROR: LIVEPROMPT_EMAIL and LIVEPROMPT_PASSWORD must be set")
        return 1

    client = LivePromptClient(args.api_url)

    try:
        client.login(email, password)
        job = client.process_audio(args.file, analysis_type=args.analysis, summary_type=args.summary)
        print(f"Job {job['id']} created, processing...")

        job = client.poll_job_status(
            job["id"],
            interval=args.interval,
            on_update=lambda j: print(f"  status: {j['status']}"),
        )
    except (ApiError, PollingTimeoutError) as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        client.logout()

    if job["status"] == "failed":
        print(f"Processing failed: {job.get('error_message')}")
        return 1

    if args.json:
        print(json.dumps(job.get("report_data"), indent=2))
    else:
        print_report(job)
    return 0


if __name__ == "__main__":
    sys.exit(main())
