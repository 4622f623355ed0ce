#!/usr/bin/env python3
"""Basic usage example for wirecodec.

This example demonstrates:
1. Defining a record with Pydantic
2. Encoding to the fixed-layout and schema-tagged formats
3. Decoding back to a Pydantic model
4. Calculating record sizes
"""

from __future__ import annotations

import enum
from typing import Annotated, Optional

from wirecodec import (
    U8,
    U16,
    U64,
    BaseRecord,
    CompactLen,
    FixedLen,
    encoded_size,
    field_sizes,
    static_size,
)


class Side(enum.Enum):
    BID = "bid"
    ASK = "ask"


# Define a record class
class Order(BaseRecord):
    """Limit order.

    Field declaration order is the wire order.
    """

    owner: Annotated[list[U8], FixedLen(32)]
    side: Side
    price: U64
    quantity: U64
    tags: Annotated[list[U16], CompactLen()]
    memo: Optional[str] = None


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("wirecodec Basic Usage Example")
    print("=" * 60)
    print()

    # Create a record instance
    print("1. Creating an order...")
    order = Order(owner=[7] * 32, side=Side.ASK, price=101_500, quantity=3, tags=[1, 300])
    print(f"   Side: {order.side.name}")
    print(f"   Price: {order.price}")
    print(f"   Quantity: {order.quantity}")
    print()

    # Analyze field sizes
    print("2. Analyzing field sizes (fixed layout)...")
    for field_name, size in field_sizes(Order).items():
        print(f"   {field_name}: {'variable' if size is None else f'{size} bytes'}")
    print(f"   Static size: {static_size(Order)}")
    print()

    # Encode in both formats
    print("3. Encoding...")
    fixed = order.encode("fixed")
    tagged = order.encode("tagged")
    print(f"   fixed:  {len(fixed)} bytes  {fixed.hex()}")
    print(f"   tagged: {len(tagged)} bytes  {tagged.hex()}")
    assert encoded_size(Order, order, "tagged") == len(tagged)
    print()

    # Decode
    print("4. Decoding from binary...")
    decoded = Order.decode(tagged, "tagged")
    print(f"   Side: {decoded.side.name}, tags: {decoded.tags}")
    print()

    # Verify round-trip
    print("5. Verifying round-trip...")
    if decoded == order and Order.decode(fixed) == order:
        print("   Round-trip successful! Records match.")
    else:
        print("   Round-trip failed! Records don't match.")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
