"""Entity to response DTO conversion shared by use cases and routes."""

from roastledger.application.dto.responses import (
    AlertSettingResponse,
    BlendComponentResponse,
    BlendEventResponse,
    ExpenseResponse,
    LedgerEntryResponse,
    LineageNodeResponse,
    PackagingResponse,
    PurchaseLineItemResponse,
    PurchaseOrderResponse,
    RoastEventResponse,
    RoastInputResponse,
    SaleLineResponse,
    SaleResponse,
    StockItemResponse,
    SupplierResponse,
)
from roastledger.core.entities import (
    AlertSetting,
    BlendEvent,
    Expense,
    LedgerEntry,
    LineageNode,
    Packaging,
    PurchaseOrder,
    RoastEvent,
    Sale,
    StockItem,
    Supplier,
)


def stock_item_response(item: StockItem) -> StockItemResponse:
    return StockItemResponse(
        id=item.id,
        kind=item.kind.value,
        variety=item.variety.value,
        quantity_kg=item.quantity_kg,
        location=item.location,
        version=item.version,
        last_updated=item.last_updated,
        created_at=item.created_at,
    )


def ledger_entry_response(entry: LedgerEntry) -> LedgerEntryResponse:
    return LedgerEntryResponse(
        id=entry.id,
        stock_item_id=entry.stock_item_id,
        delta=entry.delta,
        origin_type=entry.origin_type.value,
        origin_id=entry.origin.origin_id,
        origin=entry.origin.model_dump(mode="json"),
        correcting=entry.correcting,
        entry_date=entry.entry_date,
        created_at=entry.created_at,
    )


def purchase_order_response(
    order: PurchaseOrder, received_kg: list[float] | None = None
) -> PurchaseOrderResponse:
    """Purchase order with per-line received quantities, if known."""
    received = received_kg or [0.0] * len(order.items)
    return PurchaseOrderResponse(
        id=order.id,
        supplier_id=order.supplier_id,
        order_date=order.order_date,
        expected_delivery_date=order.expected_delivery_date,
        status=order.status.value,
        items=[
            PurchaseLineItemResponse(
                index=i,
                variety=item.variety.value,
                quantity_kg=item.quantity_kg,
                price_per_kg=item.price_per_kg,
                line_total=item.line_total,
                received_kg=received[i],
            )
            for i, item in enumerate(order.items)
        ],
        total_amount=order.total_amount,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def supplier_response(supplier: Supplier) -> SupplierResponse:
    return SupplierResponse.model_validate(supplier.model_dump(mode="json"))


def roast_event_response(roast: RoastEvent) -> RoastEventResponse:
    return RoastEventResponse(
        id=roast.id,
        batch_id=roast.batch_id,
        roast_date=roast.roast_date,
        inputs=[
            RoastInputResponse(stock_item_id=i.stock_item_id, weight_kg=i.weight_kg)
            for i in roast.inputs
        ],
        total_input_weight_kg=roast.total_input_weight,
        output_stock_item_id=roast.output_stock_item_id,
        output_weight_kg=roast.output_weight_kg,
        yield_ratio=roast.yield_ratio,
        operational_cost_per_kg=roast.operational_cost_per_kg,
        roaster_name=roast.roaster_name,
        external_roastery=roast.external_roastery,
        notes=roast.notes,
        created_at=roast.created_at,
    )


def blend_event_response(blend: BlendEvent) -> BlendEventResponse:
    return BlendEventResponse(
        id=blend.id,
        name=blend.name,
        blend_date=blend.blend_date,
        components=[
            BlendComponentResponse(
                stock_item_id=c.stock_item_id,
                percentage=c.percentage,
                weight_kg=blend.component_weight(c),
            )
            for c in blend.components
        ],
        output_stock_item_id=blend.output_stock_item_id,
        output_weight_kg=blend.output_weight_kg,
        quoted_cost_per_kg=blend.quoted_cost_per_kg,
        notes=blend.notes,
        created_at=blend.created_at,
    )


def sale_response(sale: Sale) -> SaleResponse:
    return SaleResponse(
        id=sale.id,
        invoice_number=sale.invoice_number,
        customer_name=sale.customer_name,
        sale_date=sale.sale_date,
        lines=[
            SaleLineResponse(
                stock_item_id=line.stock_item_id,
                quantity_kg=line.quantity_kg,
                price_per_kg=line.price_per_kg,
                line_total=line.line_total,
            )
            for line in sale.lines
        ],
        total_amount=sale.total_amount,
        payment_status=sale.payment_status.value,
        shipping_address=sale.shipping_address,
        notes=sale.notes,
        created_at=sale.created_at,
    )


def expense_response(expense: Expense) -> ExpenseResponse:
    return ExpenseResponse.model_validate(expense.model_dump(mode="json"))


def packaging_response(packaging: Packaging) -> PackagingResponse:
    return PackagingResponse.model_validate(packaging.model_dump(mode="json"))


def alert_setting_response(setting: AlertSetting) -> AlertSettingResponse:
    return AlertSettingResponse.model_validate(setting.model_dump(mode="json"))


def lineage_node_response(node: LineageNode) -> LineageNodeResponse:
    return LineageNodeResponse(
        stock_item_id=node.stock_item_id,
        ledger_entry_id=node.ledger_entry_id,
        origin_type=node.origin_type.value,
        origin_id=node.origin_id,
        quantity_kg=node.quantity_kg,
        cost_per_kg=node.cost_per_kg,
        sources=[lineage_node_response(s) for s in node.sources],
    )
