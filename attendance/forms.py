from django import forms

from ministry.models import Child, Classroom

from .models import AttendanceStatus, ClassMeeting, WorshipService


class ClassMeetingForm(forms.Form):
    classroom = forms.ModelChoiceField(queryset=Classroom.objects.all())
    date = forms.DateField()
    observations = forms.CharField(required=False)


class WorshipServiceForm(forms.Form):
    date = forms.DateField()
    description = forms.CharField(max_length=255, required=False)
    observations = forms.CharField(required=False)

    def clean_description(self):
        return self.cleaned_data.get("description") or None


class _MarkAttendanceForm(forms.Form):
    child = forms.ModelChoiceField(queryset=Child.objects.all())
    status = forms.ChoiceField(choices=AttendanceStatus.choices)
    observation = forms.CharField(required=False)

    def clean_observation(self):
        return self.cleaned_data.get("observation") or None


class ClassAttendanceForm(_MarkAttendanceForm):
    class_meeting = forms.ModelChoiceField(queryset=ClassMeeting.objects.all())


class WorshipAttendanceForm(_MarkAttendanceForm):
    worship_service = forms.ModelChoiceField(queryset=WorshipService.objects.all())
