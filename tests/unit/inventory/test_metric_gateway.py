import pytest
from unittest.mock import AsyncMock
from botocore.exceptions import ClientError

from app.modules.inventory.adapters.aws.metrics import (
    DAILY_PERIOD_SECONDS,
    HOURLY_PERIOD_SECONDS,
    MetricGateway,
    Statistic,
    aggregate,
    period_for_lookback,
)
from app.shared.core.exceptions import ProviderError

DIMENSIONS = [{"Name": "InstanceId", "Value": "i-123"}]


def _gateway(client_factory, mock_client, values):
    cloudwatch = mock_client(
        get_metric_data=AsyncMock(
            return_value={"MetricDataResults": [{"Id": "m1", "Values": values}]}
        )
    )
    return MetricGateway(client_factory(cloudwatch=cloudwatch)), cloudwatch


def test_period_hourly_up_to_one_day_then_daily():
    assert period_for_lookback(1) == HOURLY_PERIOD_SECONDS
    assert period_for_lookback(0.5) == HOURLY_PERIOD_SECONDS
    assert period_for_lookback(30) == DAILY_PERIOD_SECONDS


def test_aggregate_empty_is_zero():
    assert aggregate([], Statistic.SUM) == 0.0
    assert aggregate([], Statistic.AVERAGE) == 0.0


@pytest.mark.asyncio
async def test_sum_adds_samples(client_factory, mock_client):
    gateway, cloudwatch = _gateway(client_factory, mock_client, [10, 20, 5])

    result = await gateway.get_metric(
        "us-east-1", "AWS/Lambda", "Invocations", DIMENSIONS, Statistic.SUM, 1
    )

    assert result == 35
    query = cloudwatch.get_metric_data.call_args.kwargs["MetricDataQueries"][0]
    assert query["MetricStat"]["Stat"] == "Sum"
    assert query["MetricStat"]["Period"] == HOURLY_PERIOD_SECONDS


@pytest.mark.asyncio
async def test_average_is_mean_of_period_averages(client_factory, mock_client):
    gateway, cloudwatch = _gateway(client_factory, mock_client, [2.0, 4.0, 9.0])

    result = await gateway.get_metric(
        "eu-west-1", "AWS/EC2", "CPUUtilization", DIMENSIONS, Statistic.AVERAGE, 30
    )

    assert result == pytest.approx(5.0)
    kwargs = cloudwatch.get_metric_data.call_args.kwargs
    assert kwargs["MetricDataQueries"][0]["MetricStat"]["Period"] == DAILY_PERIOD_SECONDS
    assert (kwargs["EndTime"] - kwargs["StartTime"]).days == 30


@pytest.mark.asyncio
async def test_missing_results_return_zero(client_factory, mock_client):
    cloudwatch = mock_client(get_metric_data=AsyncMock(return_value={"MetricDataResults": []}))
    gateway = MetricGateway(client_factory(cloudwatch=cloudwatch))

    assert await gateway.get_metric("us-east-1", "AWS/S3", "NumberOfObjects", []) == 0.0


@pytest.mark.asyncio
async def test_queries_cloudwatch_in_requested_region(client_factory, mock_client):
    cloudwatch = mock_client(get_metric_data=AsyncMock(return_value={"MetricDataResults": []}))
    factory = client_factory(cloudwatch=cloudwatch)

    await MetricGateway(factory).get_metric("ap-south-1", "AWS/EC2", "CPUUtilization", DIMENSIONS)

    assert factory.calls == [("cloudwatch", "ap-south-1")]


@pytest.mark.asyncio
async def test_client_error_raises_provider_error(client_factory, mock_client):
    cloudwatch = mock_client(
        get_metric_data=AsyncMock(
            side_effect=ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
                "GetMetricData",
            )
        )
    )
    gateway = MetricGateway(client_factory(cloudwatch=cloudwatch))

    with pytest.raises(ProviderError) as exc:
        await gateway.get_metric("us-east-1", "AWS/EC2", "CPUUtilization", DIMENSIONS)

    assert exc.value.details["metric"] == "CPUUtilization"
