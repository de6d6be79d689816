from django import forms

from ministry.models import Child, Guardian

from .models import MessageTemplate
from .services import placeholders


class MessageTemplateForm(forms.ModelForm):
    class Meta:
        model = MessageTemplate
        fields = ["title", "body_template", "supported_variables", "is_active", "category"]

    def clean_supported_variables(self):
        value = self.cleaned_data.get("supported_variables")
        if not value:
            # Derive from the body when the client does not declare them
            return placeholders(self.cleaned_data.get("body_template") or "")
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise forms.ValidationError("Supported variables must be a list of names.")
        return value


class MessageSendForm(forms.Form):
    child = forms.ModelChoiceField(queryset=Child.objects.all())
    guardian = forms.ModelChoiceField(queryset=Guardian.objects.all())
    template = forms.ModelChoiceField(queryset=MessageTemplate.objects.all(), required=False)
    message = forms.CharField(required=False, strip=False)


class MessagePreviewForm(forms.Form):
    child = forms.ModelChoiceField(queryset=Child.objects.all())
    guardian = forms.ModelChoiceField(queryset=Guardian.objects.all())
    template = forms.ModelChoiceField(queryset=MessageTemplate.objects.all())
