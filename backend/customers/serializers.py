from rest_framework import serializers
from .models import CustomerLead


class StartSessionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, trim_whitespace=True)
    phone = serializers.CharField(
        max_length=32, required=False, allow_blank=True, allow_null=True
    )
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    table_number = serializers.CharField(
        max_length=16, required=False, allow_blank=True, allow_null=True
    )


class CustomerLeadSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerLead
        fields = ["id", "name", "phone", "email", "table_number", "created_at"]
        read_only_fields = fields
