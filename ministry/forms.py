from django import forms

from .models import Child, Classroom, Guardian, Note


class ClassroomForm(forms.ModelForm):
    class Meta:
        model = Classroom
        fields = ["name", "room", "observations"]


class ChildForm(forms.ModelForm):
    class Meta:
        model = Child
        fields = ["full_name", "birth_date", "classroom", "photo_url", "allergies", "observations"]

    def clean_full_name(self):
        name = (self.cleaned_data.get("full_name") or "").strip()
        if not name:
            raise forms.ValidationError("Full name is required.")
        return name


class GuardianForm(forms.ModelForm):
    class Meta:
        model = Guardian
        fields = ["full_name", "relationship", "phone_whatsapp", "email", "contact_authorization"]

    def clean_phone_whatsapp(self):
        phone = (self.cleaned_data.get("phone_whatsapp") or "").strip()
        digits = "".join(ch for ch in phone if ch.isdigit())
        if len(digits) < 10:
            raise forms.ValidationError("Enter a WhatsApp number with area code.")
        return phone


class NoteForm(forms.ModelForm):
    tags = forms.MultipleChoiceField(choices=Note.TAG_CHOICES, required=False)

    class Meta:
        model = Note
        fields = ["child", "title", "content", "tags", "attention_level", "reminder_date", "is_sensitive"]

    def clean_tags(self):
        # Keep declaration order and drop repeats
        picked = set(self.cleaned_data.get("tags") or [])
        return [key for key, _ in Note.TAG_CHOICES if key in picked]
