# staff/serializers.py
from rest_framework import serializers

from .models import ScheduleOverride, WeeklySchedule


class WeeklyScheduleSerializer(serializers.ModelSerializer):
    class Meta:
        model = WeeklySchedule
        fields = ["id", "staff", "day_of_week", "start_time", "end_time"]


class WeeklyScheduleRowSerializer(serializers.Serializer):
    day_of_week = serializers.IntegerField()
    start_time = serializers.CharField(max_length=5)
    end_time = serializers.CharField(max_length=5)


class WeeklyScheduleInputSerializer(serializers.Serializer):
    """PUT body: {"schedule": [{"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"}, ...]}"""
    schedule = WeeklyScheduleRowSerializer(many=True)


class ScheduleOverrideSerializer(serializers.ModelSerializer):
    class Meta:
        model = ScheduleOverride
        fields = ["id", "staff", "type", "date", "start_time", "end_time", "reason"]


class ScheduleOverrideInputSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=ScheduleOverride.TYPE_CHOICES)
    date = serializers.DateField()
    start_time = serializers.CharField(max_length=5, required=False, allow_null=True, allow_blank=True)
    end_time = serializers.CharField(max_length=5, required=False, allow_null=True, allow_blank=True)
    reason = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    # Owners/admins may act on another member; default is the caller
    staff = serializers.IntegerField(required=False, allow_null=True)


class StaffServicesSerializer(serializers.Serializer):
    service_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
