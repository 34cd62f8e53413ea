#!/usr/bin/env python3
"""Generate sample property drafts for manual validation.

Writes ``local/sample_properties.json`` with a reproducible batch of drafts
that can be imported through ``scripts/load_portfolio.py``.
"""

import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from propfolio.analytics import format_currency
from propfolio.generators import PropertyDraftGenerator
from propfolio.persistence.serialization import to_dict


def main() -> None:
    """Generate the sample drafts file."""
    output_dir = project_root / "local"
    output_dir.mkdir(exist_ok=True)

    seed = 42
    num_properties = 12

    print("=" * 60)
    print("Generating Sample Portfolio")
    print("=" * 60)

    generator = PropertyDraftGenerator(seed=seed, owner="Sample Landlord")
    drafts = list(generator.generate_batch(num_properties))

    filepath = output_dir / "sample_properties.json"
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump([to_dict(d) for d in drafts], f, indent=2, ensure_ascii=False)

    for draft in drafts:
        print(f"{draft.property_type.value:12}{format_currency(draft.valuation):>12}  {draft.address}")
    print(f"\nSaved {len(drafts)} drafts to {filepath}")
    print("=" * 60)


if __name__ == "__main__":
    main()
