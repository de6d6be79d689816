from django import forms

from ministry.models import Classroom

from .models import User


class TextField(forms.CharField):
    """CharField that refuses JSON lists, objects and numbers instead of str()-ing them."""
    default_error_messages = {"invalid": "Enter a text value."}

    def to_python(self, value):
        if value not in self.empty_values and not isinstance(value, str):
            raise forms.ValidationError(self.error_messages["invalid"], code="invalid")
        return super().to_python(value)


class LoginForm(forms.Form):
    username = TextField(max_length=150)
    password = TextField(max_length=128, strip=False)


class RegistrationForm(forms.Form):
    username = TextField(max_length=150)
    password = TextField(min_length=1, max_length=128, strip=False)
    email = forms.EmailField(required=False)
    first_name = forms.CharField(max_length=150, required=False)
    last_name = forms.CharField(max_length=150, required=False)
    role = forms.ChoiceField(choices=User.Role.choices, required=False)

    def clean_email(self):
        # Blank emails are stored as NULL so the unique constraint ignores them
        return self.cleaned_data.get("email") or None


class UserForm(forms.ModelForm):
    """Admin-side create/update; password is optional on update."""
    password = TextField(max_length=128, required=False, strip=False)
    classes = forms.ModelMultipleChoiceField(
        queryset=Classroom.objects.all(),
        required=False,
    )

    class Meta:
        model = User
        fields = ["username", "email", "first_name", "last_name", "role", "is_active", "classes"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance._state.adding:
            self.fields["password"].required = True

    def save(self, commit=True):
        user = super().save(commit=False)
        raw = self.cleaned_data.get("password")
        if raw:
            user.set_password(raw)
        if commit:
            user.save()
            self.save_m2m()
        return user


class PasswordChangeForm(forms.Form):
    current_password = TextField(strip=False)
    new_password = TextField(min_length=1, max_length=128, strip=False)
