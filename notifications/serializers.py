from rest_framework import serializers


class NotifyUserSerializer(serializers.Serializer):
    email = serializers.EmailField()
    title = serializers.CharField(max_length=200)
    body = serializers.CharField(max_length=1000)
