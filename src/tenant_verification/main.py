import argparse
import json
import sys

from dotenv import load_dotenv

from tenant_verification.config import configure_logging, load_config
from tenant_verification.errors import ConfigError
from tenant_verification.models import TenantRecord
from tenant_verification.orchestrator import run_verification_sync
from tenant_verification.tools.extraction import extract_from_text
from tenant_verification.tools.history import save_report_summary


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="tenant-verify", description="Verify a tenant against the configured providers.")
    parser.add_argument("record", nargs="?", help="JSON file with the tenant record (default: stdin)")
    parser.add_argument("--text", help="Free text to extract phone/email/Aadhaar/PAN from instead of a JSON record")
    parser.add_argument("--config", help="YAML file with provider settings")
    parser.add_argument("--save", action="store_true", help="Store a summary in the verification history")
    return parser.parse_args(argv)


def _read_record(args) -> TenantRecord:
    if args.text is not None:
        return extract_from_text(args.text)
    if args.record:
        with open(args.record, "r", encoding="utf-8") as f:
            return TenantRecord(**json.load(f))
    return TenantRecord(**json.load(sys.stdin))


def run(argv=None):
    load_dotenv()
    args = _parse_args(argv)
    configure_logging()

    try:
        record = _read_record(args)
    except (OSError, TypeError, ValueError) as e:
        print(f"Invalid tenant record: {e}", file=sys.stderr)
        return 2

    try:
        config = load_config(config_file=args.config)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    report = run_verification_sync(record, config)
    if args.save:
        save_report_summary(report)

    print(report.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(run())
