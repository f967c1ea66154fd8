"""Customer form."""
from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired, Length, Optional, Regexp

EMAIL_REGEX = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


class CustomerForm(FlaskForm):
    """Form for creating/editing customers."""

    name = StringField(
        'Nombre',
        validators=[DataRequired(message='El nombre del cliente es obligatorio'), Length(max=200)]
    )

    email = StringField(
        'Email',
        validators=[
            DataRequired(message='El email es obligatorio'),
            Regexp(EMAIL_REGEX, message='Email inválido. Use formato: user@example.com'),
            Length(max=255)
        ]
    )

    phone = StringField('Teléfono', validators=[Optional(), Length(max=50)])
