from rest_framework import serializers

from .models import Table, TableStatus


class TableSerializer(serializers.ModelSerializer):
    status = serializers.ChoiceField(choices=TableStatus.choices, default=TableStatus.FREE)

    class Meta:
        model = Table
        fields = ['id', 'number', 'capacity', 'status', 'location', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'capacity': {'min_value': 1},
            # Duplicate numbers are reported as conflicts by the views
            'number': {'validators': []},
        }

    def validate_number(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Table number cannot be empty")
        return value


class TableStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TableStatus.choices)
