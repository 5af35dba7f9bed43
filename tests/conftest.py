"""Pytest fixtures for kinesis-consumer tests."""

import boto3
import pytest
from moto import mock_aws

REGION = "us-east-1"


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    # Unset AWS_ENDPOINT_URL to ensure moto intercepts requests
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def kinesis_client(aws_credentials):
    """Plain Kinesis client, for use with botocore's Stubber."""
    return boto3.client("kinesis", region_name=REGION)


@pytest.fixture
def mock_kinesis(aws_credentials):
    """Mock Kinesis for tests."""
    with mock_aws():
        yield


@pytest.fixture
def stream_arn(mock_kinesis):
    """Create a moto stream and return its ARN."""
    client = boto3.client("kinesis", region_name=REGION)
    client.create_stream(StreamName="orders", ShardCount=1)
    return client.describe_stream_summary(StreamName="orders")["StreamDescriptionSummary"][
        "StreamARN"
    ]


@pytest.fixture
def template():
    """Compiled template with one function and its Kinesis event source mapping."""
    return {
        "AWSTemplateFormatVersion": "2010-09-09",
        "Resources": {
            "IamRoleLambdaExecution": {"Type": "AWS::IAM::Role", "Properties": {}},
            "ProcessLambdaFunction": {
                "Type": "AWS::Lambda::Function",
                "Properties": {"Role": {"Fn::GetAtt": ["IamRoleLambdaExecution", "Arn"]}},
            },
            "ProcessEventSourceMappingKinesisOrders": {
                "Type": "AWS::Lambda::EventSourceMapping",
                "Properties": {
                    "EventSourceArn": {"Fn::GetAtt": ["Orders", "Arn"]},
                    "FunctionName": {"Fn::GetAtt": ["ProcessLambdaFunction", "Arn"]},
                },
                "DependsOn": ["IamRoleLambdaExecution"],
            },
            "ProcessEventSourceMappingKinesisPayments": {
                "Type": "AWS::Lambda::EventSourceMapping",
                "Properties": {
                    "EventSourceArn": {"Fn::GetAtt": ["Payments", "Arn"]},
                    "FunctionName": {"Fn::GetAtt": ["ProcessLambdaFunction", "Arn"]},
                },
                "DependsOn": "IamRoleLambdaExecution",
            },
        },
    }
