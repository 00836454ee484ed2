from rest_framework import serializers


class StrictSerializerMixin:
    """
    Reject payload keys the serializer does not declare.

    DRF silently drops unknown fields; for request bodies that drive money
    (checkout, voucher preview) an unexpected key such as a client-side
    price is an error, not something to ignore.
    """

    def to_internal_value(self, data):
        if isinstance(data, dict):
            unknown = sorted(set(data) - set(self.fields))
            if unknown:
                raise serializers.ValidationError(
                    {key: ["This field is not allowed."] for key in unknown}
                )
        return super().to_internal_value(data)


class StrictSerializer(StrictSerializerMixin, serializers.Serializer):
    pass


class TimestampedSerializer(serializers.ModelSerializer):
    """Adds read-only created_at/updated_at to model serializers."""

    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)
