"""
Transaction Classifier -- jurisdiction relationship and digital detection.

Pure functions of the transaction and the knowledge base.  No error
conditions: absent or garbled input degrades to DOMESTIC / False.

    cross_border   seller code != buyer code (missing code = "unknown")
    intra-EU       cross_border and both codes are EU members
    export         cross_border and not intra-EU
    digital        digital product-type tag, or a line description that
                   contains a digital-service keyword (case-insensitive)
"""

from __future__ import annotations

from tax_config.schema import JurisdictionKnowledgeBase
from tax_kernel.domain.transaction import (
    TransactionData,
    TransactionFlags,
    TransactionKind,
)


def determine_transaction_kind(
    transaction: TransactionData,
    knowledge_base: JurisdictionKnowledgeBase,
) -> TransactionKind:
    """Classify the seller/buyer jurisdiction relationship."""
    seller = transaction.seller_jurisdiction_code
    buyer = transaction.buyer_jurisdiction_code

    if seller == buyer:
        return TransactionKind.DOMESTIC

    if knowledge_base.is_eu_member(seller) and knowledge_base.is_eu_member(buyer):
        return TransactionKind.INTRA_EU

    return TransactionKind.EXPORT


def detect_digital_services(
    transaction: TransactionData,
    knowledge_base: JurisdictionKnowledgeBase,
) -> bool:
    """True if the product tags or any line description indicate digital services."""
    if transaction.product_types & knowledge_base.digital_product_types:
        return True
    return any(
        knowledge_base.matches_digital_keyword(description)
        for description in transaction.line_descriptions
    )


def classify_transaction(
    transaction: TransactionData,
    knowledge_base: JurisdictionKnowledgeBase,
) -> TransactionFlags:
    """Compute the classification flags every rule reads."""
    return TransactionFlags(
        kind=determine_transaction_kind(transaction, knowledge_base),
        digital_services=detect_digital_services(transaction, knowledge_base),
    )
