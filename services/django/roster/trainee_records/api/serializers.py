from rest_framework import serializers


class SubjectSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField()
    code = serializers.CharField()
    level = serializers.IntegerField(min_value=1, default=1)
    credit_hours = serializers.IntegerField(min_value=0, default=3)


class TraineeSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    full_name = serializers.CharField()
    national_id = serializers.CharField(allow_blank=True, required=False)
    trainee_number = serializers.CharField(allow_blank=True, required=False)
    phone_number = serializers.CharField(allow_blank=True, required=False)
    major = serializers.CharField(allow_blank=True, required=False)
    gpa = serializers.CharField(allow_blank=True, required=False)
    completed_hours = serializers.IntegerField(required=False)
    remaining_hours = serializers.IntegerField(required=False)
    passed_subject_ids = serializers.ListField(child=serializers.CharField(), required=False)
    failed_subject_ids = serializers.ListField(child=serializers.CharField(), required=False)


class TraineeLookupSerializer(serializers.Serializer):
    trainee = TraineeSerializer()
    remaining_subjects = SubjectSerializer(many=True)


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.CharField(allow_blank=False), allow_empty=False)
