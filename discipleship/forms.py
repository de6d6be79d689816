from django import forms

from ministry.models import Child

from .models import BibleVerse, MeditationDelivery, MeditationWeek, VerseMemorization


class MeditationWeekForm(forms.ModelForm):
    class Meta:
        model = MeditationWeek
        fields = ["week_reference", "theme", "material_link", "allows_attachments"]


class BibleVerseForm(forms.ModelForm):
    class Meta:
        model = BibleVerse
        fields = ["reference", "text", "week_reference"]


class MeditationStatusForm(forms.Form):
    child = forms.ModelChoiceField(queryset=Child.objects.all())
    meditation_week = forms.ModelChoiceField(queryset=MeditationWeek.objects.all())
    status = forms.ChoiceField(choices=MeditationDelivery.Status.choices)
    observation = forms.CharField(required=False)
    evidence_url = forms.URLField(required=False, max_length=500)


class VerseMemorizationForm(forms.Form):
    child = forms.ModelChoiceField(queryset=Child.objects.all())
    bible_verse = forms.ModelChoiceField(queryset=BibleVerse.objects.all())
    status = forms.ChoiceField(choices=VerseMemorization.Status.choices)
    observation = forms.CharField(required=False)
