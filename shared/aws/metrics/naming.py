"""
shared/aws/metrics/naming.py - measurement/field/tag 이름 변환

CloudWatch 식별자(CamelCase, "AWS/ELB" 형식)를 snake_case 이름으로 변환합니다.

예시:
    format_field("Latency", "Average")     # "latency_average"
    format_measurement("AWS/ELB")          # "cloudwatch_aws_elb"
    format_tag_key("LoadBalancerName")     # "load_balancer_name"
"""

MEASUREMENT_PREFIX = "cloudwatch"


def snake_case(name: str) -> str:
    """CamelCase 문자열을 snake_case로 변환

    대문자 앞에 `_`를 넣되, 다음 글자가 소문자이거나 이전 글자가 소문자인 경우에만 넣습니다.
    그래서 연속된 대문자(약어)는 한 단어로 유지됩니다. 변환 후 `__`는 `_`로 줄입니다.

    Example:
        snake_case("CPUUtilization")  # "cpu_utilization"
        snake_case("SampleCount")     # "sample_count"
    """
    out: list[str] = []
    length = len(name)
    for i, ch in enumerate(name):
        if (
            i > 0
            and ch.isupper()
            and ((i + 1 < length and name[i + 1].islower()) or name[i - 1].islower())
        ):
            out.append("_")
        out.append(ch.lower())
    return "".join(out).replace("__", "_")


def format_field(metric_name: str, statistic: str) -> str:
    """메트릭 이름 + 통계 이름으로 field 이름 생성"""
    return f"{snake_case(metric_name)}_{snake_case(statistic)}"


def format_measurement(namespace: str) -> str:
    """네임스페이스로 measurement 이름 생성 ("AWS/ELB" -> "cloudwatch_aws_elb")"""
    return f"{MEASUREMENT_PREFIX}_{snake_case(namespace.replace('/', '_'))}"


def format_tag_key(name: str) -> str:
    """차원 이름 또는 단위를 tag 키/값 형식으로 변환"""
    return snake_case(name)
