#!/usr/bin/env python
"""
Score an audit payload from the command line.

Loads the audit JSON, optionally applies answers, and prints the host
outputs (completion, total score, changed items, audit scores) as JSON.

Usage:
    python -m audit_scoring.scripts.score_audit audit.json
    python -m audit_scoring.scripts.score_audit audit.json --template template.json --pretty
    python -m audit_scoring.scripts.score_audit audit.json --answer Q1=Yes --sku GROUP/SKU7=Yes
    python -m audit_scoring.scripts.score_audit audit.json --sub RATIO1/SUB2=40 --rescore
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from audit_scoring.core.logging import configure_logging
from audit_scoring.services.ingest import load_audit_template
from audit_scoring.services.session import AuditSession
from audit_scoring.services.snapshot_store import get_snapshot_store

logger = logging.getLogger(__name__)


def _split_assignment(text: str) -> Tuple[Optional[str], str, str]:
    """'PARENT/CHILD=VALUE' -> (PARENT, CHILD, VALUE); the parent is optional."""
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"expected ID=VALUE, got {text!r}")
    target, value = text.split("=", 1)
    parent, _, child = target.rpartition("/")
    return (parent or None), child, value


def _category_of(session: AuditSession, question_id: str) -> Optional[str]:
    for category in session.categories:
        if any(q.id == question_id for q in category.questions):
            return category.id
    return None


def apply_answers(session: AuditSession, answers: List[str], subs: List[str], skus: List[str]) -> int:
    """Apply CLI assignments; returns how many were applied."""
    applied = 0
    for item in answers:
        _, question_id, value = _split_assignment(item)
        category_id = _category_of(session, question_id)
        if category_id and session.apply_answer(question_id, category_id, value):
            applied += 1
        else:
            logger.warning(f"Answer not applied: {item}")
    for item in subs:
        parent, sub_id, value = _split_assignment(item)
        if parent and session.apply_sub_answer(sub_id, parent, value):
            applied += 1
        else:
            logger.warning(f"Sub-answer not applied: {item}")
    for item in skus:
        parent, sku_id, value = _split_assignment(item)
        if parent and session.apply_sku_answer(sku_id, parent, value):
            applied += 1
        else:
            logger.warning(f"SKU answer not applied: {item}")
    return applied


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    ap = argparse.ArgumentParser(description="Score an audit questionnaire")
    ap.add_argument("audit", type=Path, help="Audit record JSON file")
    ap.add_argument("--template", type=Path, help="Audit template JSON file")
    ap.add_argument("--answer", action="append", default=[], metavar="QID=VALUE")
    ap.add_argument("--sub", action="append", default=[], metavar="PARENT/SUB=VALUE")
    ap.add_argument("--sku", action="append", default=[], metavar="PARENT/SKU=VALUE")
    ap.add_argument("--rescore", action="store_true", help="Score every question before printing")
    ap.add_argument("--persist", action="store_true", help="Save snapshots to the configured store")
    ap.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    args = ap.parse_args(argv)

    configure_logging()

    try:
        raw = args.audit.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Cannot read {args.audit}: {e}")
        return 1

    template = None
    if args.template:
        try:
            template = load_audit_template(args.template.read_text(encoding="utf-8"))
        except OSError as e:
            logger.error(f"Cannot read {args.template}: {e}")
            return 1

    store = get_snapshot_store() if args.persist else None
    session = AuditSession.from_json(raw, template=template, store=store)

    if args.rescore:
        session.rescore_all()
    applied = apply_answers(session, args.answer, args.sub, args.sku)
    logger.info(f"Applied {applied} answer(s)")

    outputs = session.outputs()
    outputs["auditScores"] = session.audit_scores()
    json.dump(outputs, sys.stdout, indent=2 if args.pretty else None)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
