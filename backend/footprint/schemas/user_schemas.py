from marshmallow import Schema, fields, validate, post_load


class UserRegistrationSchema(Schema):
    name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=50, error="Name must be between 1 and 50 characters")
    )

    surname = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=50, error="Surname must be between 1 and 50 characters")
    )

    email = fields.Email(
        required=True,
        validate=validate.Length(max=120, error="Email must be less than 120 characters")
    )

    password = fields.Str(
        required=True,
        validate=validate.Length(min=6, error="Password must be at least 6 characters long")
    )

    @post_load
    def clean_data(self, data, **kwargs):
        """Clean and normalize data after validation"""
        # Strip whitespace
        for key, value in data.items():
            if isinstance(value, str) and key != 'password':
                data[key] = value.strip()

        # Lowercase email
        if 'email' in data:
            data['email'] = data['email'].lower()

        return data


class UserLoginSchema(Schema):
    email = fields.Email(
        required=True,
        validate=validate.Email(error="Invalid email address")
    )

    password = fields.Str(
        required=True,
        validate=validate.Length(min=1, error="Password is required")
    )

    @post_load
    def clean_data(self, data, **kwargs):
        data['email'] = data['email'].strip().lower()
        return data
