from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import anyio

from extraction_agent.agent import initialize_agent
from extraction_agent.config import CONFIG
from extraction_agent.schemas import ExtractionContext


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one document extraction and print the result JSON.")
    parser.add_argument("path", type=Path, help="Plain-text document (OCR output or similar)")
    parser.add_argument("--category", default="other", help="Document category, e.g. passport or visa")
    parser.add_argument("--model", default=None, help="Override the configured model")
    parser.add_argument("--no-correction", action="store_true", help="Skip the correction pass")
    args = parser.parse_args()

    logging.basicConfig(level=CONFIG.log_level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")

    agent = initialize_agent()
    updates = {}
    if args.model:
        updates["model"] = args.model
    if args.no_correction:
        updates["enable_correction"] = False
    if updates:
        agent.update_config(updates)

    context = ExtractionContext(
        document_category=args.category,
        document_text=args.path.read_text(),
        file_type=args.path.suffix.lstrip("."),
        filename=args.path.name,
    )
    result = anyio.run(agent.extract_document, context)
    print(json.dumps(result.model_dump(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
