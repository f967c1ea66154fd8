"""
Order entry forms.

The order number and each line's unit price are display-only: the server
generates the number and snapshots prices, so neither is read from here.
"""
from wtforms import Form, IntegerField, SelectField, DecimalField, TextAreaField, FieldList, FormField
from wtforms.validators import InputRequired, NumberRange, Optional
from flask_wtf import FlaskForm

from backoffice.models import OrderStatus


class OrderItemForm(Form):
    """One repeater row (plain Form: the parent form carries CSRF)."""

    id = IntegerField('Id', validators=[Optional()])

    product_id = IntegerField('Producto', validators=[Optional()])

    quantity = IntegerField(
        'Cantidad',
        default=1,
        validators=[
            InputRequired(message='La cantidad es obligatoria'),
            NumberRange(min=0, message='La cantidad no puede ser negativa')
        ]
    )


class OrderForm(FlaskForm):
    """Order wizard: details step plus the items repeater."""

    customer_id = IntegerField('Cliente', validators=[InputRequired(message='El cliente es obligatorio')])

    status = SelectField(
        'Estado',
        choices=[(status.value, status.value.capitalize()) for status in OrderStatus],
        default=OrderStatus.PENDING.value
    )

    shipping_price = DecimalField(
        'Costo de envío',
        places=2,
        validators=[
            InputRequired(message='El costo de envío es obligatorio'),
            NumberRange(min=0, message='El costo de envío no puede ser negativo')
        ],
        render_kw={'placeholder': '0.00', 'step': '0.01', 'min': '0'}
    )

    notes = TextAreaField('Notas', validators=[Optional()])

    items = FieldList(FormField(OrderItemForm), min_entries=0)
