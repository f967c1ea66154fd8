"""JSON serialization of models for the form/UI layer."""
from decimal import Decimal
from datetime import date, datetime
from typing import Any, Dict, Optional, Union


def money(value: Union[int, float, Decimal, str, None]) -> str:
    """Two-decimal string: money(25.5) -> "25.50", money(None) -> "0.00"."""
    if value is None or value == '':
        return '0.00'
    return str(Decimal(str(value)).quantize(Decimal('0.01')))


def iso(value: Union[date, datetime, None]) -> Optional[str]:
    return value.isoformat() if value else None


def _common(record) -> Dict[str, Any]:
    return {
        'created_at': iso(record.created_at),
        'updated_at': iso(record.updated_at),
        'deleted_at': iso(record.deleted_at),
    }


def brand_to_dict(brand) -> Dict[str, Any]:
    return {
        'id': brand.id,
        'name': brand.name,
        'slug': brand.slug,
        'url': brand.url,
        'description': brand.description,
        'is_visible': brand.is_visible,
        'primary_hex': brand.primary_hex,
        **_common(brand),
    }


def category_to_dict(category) -> Dict[str, Any]:
    return {
        'id': category.id,
        'name': category.name,
        'slug': category.slug,
        'description': category.description,
        'is_visible': category.is_visible,
        'parent_id': category.parent_id,
        'parent_name': category.parent.name if category.parent else None,
        **_common(category),
    }


def product_to_dict(product) -> Dict[str, Any]:
    return {
        'id': product.id,
        'name': product.name,
        'slug': product.slug,
        'sku': product.sku,
        'description': product.description,
        'price': money(product.price),
        'quantity': product.quantity,
        'type': product.type.value if product.type else None,
        'is_visible': product.is_visible,
        'is_featured': product.is_featured,
        'published_at': iso(product.published_at),
        'brand_id': product.brand_id,
        'brand_name': product.brand.name if product.brand else None,
        'category_ids': sorted(category.id for category in product.categories),
        **_common(product),
    }


def customer_to_dict(customer) -> Dict[str, Any]:
    return {
        'id': customer.id,
        'name': customer.name,
        'email': customer.email,
        'phone': customer.phone,
        **_common(customer),
    }


def order_item_to_dict(item) -> Dict[str, Any]:
    return {
        'id': item.id,
        'product_id': item.product_id,
        'product_name': item.product.name if item.product else None,
        'quantity': item.quantity,
        'unit_price': money(item.unit_price),
        'total_price': money(item.total_price),
    }


def order_to_dict(order, total_price=None, with_items: bool = True) -> Dict[str, Any]:
    data = {
        'id': order.id,
        'number': order.number,
        'customer_id': order.customer_id,
        'customer_name': order.customer.name if order.customer else None,
        'status': order.status.value if order.status else None,
        'shipping_price': money(order.shipping_price),
        'notes': order.notes,
        'total_price': money(order.total_price if total_price is None else total_price),
        **_common(order),
    }
    if with_items:
        data['items'] = [order_item_to_dict(item) for item in order.items]
    return data
