#!/usr/bin/env python3
"""
EthicalTrace Command Line Interface

Usage:
    ethicaltrace demo [--start-height N]
    ethicaltrace hash --file <file> [--json]
"""

import argparse
import json
import sys

DEMO_ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
DEMO_CONSUMER = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"


def load_json(path: str) -> dict:
    """Load JSON from file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def cmd_hash(args):
    """Print the 32-byte evidence hash of a file."""
    from ethicaltrace import evidence_hash, evidence_hash_json, hash_hex

    if args.json:
        digest = evidence_hash_json(load_json(args.file))
    else:
        with open(args.file, 'rb') as f:
            digest = evidence_hash(f.read())

    print(hash_hex(digest))
    return 0


def _show(label: str, outcome) -> None:
    mark = "✓" if outcome.is_ok() else "✗"
    print(f"  {mark} {label}: {json.dumps(outcome.to_dict())}")


def cmd_demo(args):
    """Run a demonstration of all four stores against a manual clock."""
    from ethicaltrace import (
        ConsumerVerification,
        LaborCertificationStore,
        ManualClock,
        MaterialTracking,
        SupplierVerification,
        evidence_hash_json,
    )

    clock = ManualClock(height=args.start_height)
    evidence = evidence_hash_json({"audit": "site-visit", "auditor": "demo"})

    print("=" * 60)
    print("EthicalTrace Demonstration")
    print("=" * 60)

    print(f"\nBlock height: {clock.now()}")

    print("\n" + "-" * 60)
    print("Supplier verification")
    print("-" * 60)
    suppliers = SupplierVerification(admin=DEMO_ADMIN, clock=clock)
    _show("register supplier-001", suppliers.register_supplier(DEMO_ADMIN, "supplier-001", "Eco Fabrics Inc"))
    _show("register supplier-001 again", suppliers.register_supplier(DEMO_ADMIN, "supplier-001", "Duplicate"))
    _show("verify supplier-001 by non-admin", suppliers.verify_supplier(DEMO_CONSUMER, "supplier-001", 4))
    _show("verify supplier-001", suppliers.verify_supplier(DEMO_ADMIN, "supplier-001", 4))
    _show("add standard", suppliers.add_ethical_standard(
        DEMO_ADMIN, "standard-001", "Fair Trade", "Ensures fair compensation", 3))
    _show("record compliance", suppliers.record_compliance(
        DEMO_ADMIN, "supplier-001", "standard-001", True, evidence))
    print(f"  supplier: {suppliers.get_supplier('supplier-001').to_dict()}")
    print(f"  compliance: {suppliers.check_compliance('supplier-001', 'standard-001').to_dict()}")

    print("\n" + "-" * 60)
    print("Labor certification")
    print("-" * 60)
    labor = LaborCertificationStore(admin=DEMO_ADMIN, clock=clock)
    _show("register entity", labor.register_certification(
        DEMO_ADMIN, "entity-001", "Textile Factory A", "fair-labor"))
    _show("certify for 1000 blocks", labor.certify_entity(DEMO_ADMIN, "entity-001", 1000))
    print(f"  valid at {clock.now()}: {labor.is_certification_valid('entity-001')}")
    clock.advance(1000)
    print(f"  valid at {clock.now()}: {labor.is_certification_valid('entity-001')}")

    print("\n" + "-" * 60)
    print("Material tracking")
    print("-" * 60)
    materials = MaterialTracking(admin=DEMO_ADMIN, clock=clock)
    _show("register material", materials.register_material(
        DEMO_ADMIN, "material-001", "Organic Cotton", "IN", "supplier-001"))
    _show("certify material", materials.certify_material(DEMO_ADMIN, "material-001"))

    print("\n" + "-" * 60)
    print("Consumer verification")
    print("-" * 60)
    consumer = ConsumerVerification(admin=DEMO_ADMIN, clock=clock)
    _show("verify product-001", consumer.register_verification(
        DEMO_ADMIN, "product-001", 4, True, True, evidence))
    _show("verify product-002", consumer.register_verification(
        DEMO_ADMIN, "product-002", 2, False, True, evidence))
    _show("review with rating 6", consumer.submit_review(
        DEMO_CONSUMER, "product-001", 6, "Invalid rating", True))
    _show("review with rating 4", consumer.submit_review(
        DEMO_CONSUMER, "product-001", 4, "Great eco-friendly product", True))
    for product_id in ("product-001", "product-002", "product-003"):
        print(f"  {product_id} ethical: {consumer.is_product_ethical(product_id)}")

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="EthicalTrace compliance registry CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ethicaltrace demo                       Run demonstration
  ethicaltrace hash -f audit.pdf          Evidence hash of raw bytes
  ethicaltrace hash -f audit.json --json  Evidence hash of canonical JSON
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # hash
    hash_parser = subparsers.add_parser("hash", help="Compute 32-byte evidence hash")
    hash_parser.add_argument("-f", "--file", required=True, help="Evidence file")
    hash_parser.add_argument("--json", action="store_true", help="Hash canonical JSON instead of raw bytes")

    # demo
    demo_parser = subparsers.add_parser("demo", help="Run demonstration")
    demo_parser.add_argument("--start-height", type=int, default=100, help="Initial block height")

    args = parser.parse_args()

    if args.command == "hash":
        sys.exit(cmd_hash(args))
    elif args.command == "demo":
        sys.exit(cmd_demo(args))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
