# FILE: medvanta/backend/exercises/api/serializers.py

from rest_framework import serializers

from exercises.models import Equipment, Exercise, ExerciseTemplate
from exercises.services.template_service import describe_template


class EquipmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Equipment
        fields = ["id", "name"]


class ExerciseSerializer(serializers.ModelSerializer):
    """Library exercise"""

    class Meta:
        model = Exercise
        fields = [
            "id",
            "exercise_name",
            "type",
            "video_type",
            "video_url",
            "library_tip",
            "library_check_in_question",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class ExerciseUpdateSerializer(serializers.Serializer):
    exercise_name = serializers.CharField(max_length=255, required=False)
    type = serializers.CharField(max_length=100, required=False, allow_blank=True)
    video_type = serializers.ChoiceField(choices=Exercise.VideoType.choices, required=False)
    video_url = serializers.URLField(max_length=1000, required=False, allow_null=True)
    library_tip = serializers.CharField(required=False, allow_blank=True)
    library_check_in_question = serializers.CharField(required=False, allow_blank=True)


class LibraryRequestSerializer(serializers.Serializer):
    """Query parameters for the library listing"""

    search = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.CharField(required=False, allow_blank=True, default="")
    video_type = serializers.ChoiceField(
        required=False,
        allow_blank=True,
        default="",
        choices=[("youtube", "YouTube"), ("file", "File")],
    )
    sort_by = serializers.ChoiceField(
        required=False,
        default="exercise_name",
        choices=[
            ("exercise_name", "Name"),
            ("created_at", "Created"),
            ("updated_at", "Updated"),
        ],
    )
    sort_order = serializers.ChoiceField(required=False, default="asc", choices=["asc", "desc"])
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    page_size = serializers.IntegerField(required=False, default=20, min_value=1, max_value=100)


class TemplateListRequestSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default="")
    sort_by = serializers.ChoiceField(
        required=False,
        default="updated_at",
        choices=[
            ("updated_at", "Updated"),
            ("created_at", "Created"),
            ("exercise_name", "Exercise name"),
        ],
    )
    sort_order = serializers.ChoiceField(required=False, default="desc", choices=["asc", "desc"])
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    page_size = serializers.IntegerField(required=False, default=20, min_value=1, max_value=100)


class ExerciseTemplateSerializer(serializers.ModelSerializer):
    """Exercise template joined with its exercise"""

    exercise_name = serializers.CharField(source="exercise.exercise_name", read_only=True)
    video_type = serializers.CharField(source="exercise.video_type", read_only=True)
    video_url = serializers.CharField(source="exercise.video_url", read_only=True, allow_null=True)
    description = serializers.SerializerMethodField()

    class Meta:
        model = ExerciseTemplate
        fields = [
            "id",
            "template_hash",
            "exercise",
            "exercise_name",
            "video_type",
            "video_url",
            "notes",
            "sets",
            "time",
            "rep",
            "distance",
            "weight",
            "rest_time",
            "equipment_ids",
            "rep_override",
            "time_override",
            "distance_override",
            "weight_override",
            "rest_time_override",
            "description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_description(self, obj):
        return describe_template(obj)


class ExerciseTemplateWriteSerializer(serializers.Serializer):
    exercise_id = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    sets = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    time = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    rep = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    distance = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)
    weight = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)
    rest_time = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    equipment_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    rep_override = serializers.ListField(child=serializers.IntegerField(), required=False, allow_null=True)
    time_override = serializers.ListField(child=serializers.IntegerField(), required=False, allow_null=True)
    distance_override = serializers.ListField(child=serializers.CharField(), required=False, allow_null=True)
    weight_override = serializers.ListField(child=serializers.CharField(), required=False, allow_null=True)
    rest_time_override = serializers.ListField(child=serializers.IntegerField(), required=False, allow_null=True)


class PaginatedExercisesSerializer(serializers.Serializer):
    data = ExerciseSerializer(many=True)
    page = serializers.IntegerField()
    page_size = serializers.IntegerField()
    total = serializers.IntegerField()
    has_more = serializers.BooleanField()


class PaginatedTemplatesSerializer(serializers.Serializer):
    data = ExerciseTemplateSerializer(many=True)
    page = serializers.IntegerField()
    page_size = serializers.IntegerField()
    total = serializers.IntegerField()
    has_more = serializers.BooleanField()
