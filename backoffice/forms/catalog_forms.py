"""
Catalog forms: brands, categories and products.

Slug fields are not part of these forms: the slug is derived server-side
when a record is created and is read-only afterwards.
"""
from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, BooleanField, IntegerField, SelectField, SelectMultipleField, DateField
from wtforms.validators import DataRequired, InputRequired, Length, Optional, NumberRange, Regexp

from backoffice.models import ProductType

PRICE_REGEX = r'^\d{1,6}(\.\d{0,2})?$'
HEX_COLOR_REGEX = r'^#[0-9a-fA-F]{6}$'


class BrandForm(FlaskForm):
    """Form for creating/editing brands."""

    name = StringField(
        'Nombre',
        validators=[DataRequired(message='El nombre es obligatorio'), Length(max=255)]
    )

    url = StringField(
        'Website URL',
        validators=[DataRequired(message='La URL es obligatoria'), Length(max=255)],
        render_kw={'placeholder': 'https://'}
    )

    description = TextAreaField('Descripción', validators=[Optional()])

    is_visible = BooleanField('Visibilidad', default=True)

    primary_hex = StringField(
        'Color primario',
        validators=[Optional(), Regexp(HEX_COLOR_REGEX, message='Color inválido. Usá #RRGGBB')]
    )


class CategoryForm(FlaskForm):
    """Form for creating/editing categories."""

    name = StringField(
        'Nombre',
        validators=[DataRequired(message='El nombre es obligatorio'), Length(max=255)]
    )

    description = TextAreaField('Descripción', validators=[Optional()])

    is_visible = BooleanField('Visibilidad', default=True)

    parent_id = IntegerField('Categoría padre', validators=[Optional()])


class ProductForm(FlaskForm):
    """Form for creating/editing products."""

    name = StringField(
        'Nombre',
        validators=[DataRequired(message='El nombre es obligatorio'), Length(max=255)]
    )

    description = TextAreaField('Descripción', validators=[Optional()])

    sku = StringField(
        'SKU (Stock Keeping Unit)',
        validators=[DataRequired(message='El SKU es obligatorio'), Length(max=64)]
    )

    # Kept as text so the format rule sees exactly what was typed
    price = StringField(
        'Precio',
        validators=[
            DataRequired(message='El precio es obligatorio'),
            Regexp(PRICE_REGEX, message='Precio inválido: hasta 6 dígitos enteros y 2 decimales')
        ],
        render_kw={'placeholder': '0.00'}
    )

    quantity = IntegerField(
        'Cantidad',
        validators=[
            InputRequired(message='La cantidad es obligatoria'),
            NumberRange(min=0, max=100, message='La cantidad debe estar entre 0 y 100')
        ]
    )

    type = SelectField(
        'Tipo',
        choices=[(product_type.value, product_type.value) for product_type in ProductType],
        validators=[DataRequired(message='El tipo es obligatorio')]
    )

    is_visible = BooleanField('Visibilidad', default=True)

    is_featured = BooleanField('Destacado', default=False)

    published_at = DateField('Disponibilidad', validators=[Optional()], format='%Y-%m-%d')

    brand_id = IntegerField('Marca', validators=[InputRequired(message='La marca es obligatoria')])

    # Choices come from the database; existence is checked by the service
    category_ids = SelectMultipleField(
        'Categorías',
        coerce=int,
        validate_choice=False,
        validators=[DataRequired(message='Selecciona al menos una categoría')]
    )


class CategoryProductForm(ProductForm):
    """Product form shown inside a category; that category is attached automatically."""

    category_ids = SelectMultipleField('Otras categorías', coerce=int, validate_choice=False, validators=[Optional()])
