from collections.abc import Mapping, Sequence

from assethook.models import Message, Result


def aggregate(per_service: Mapping[str, Sequence[Message]]) -> Result:
    """
    Merge the messages of every service into one result.

    Messages are grouped by file name. For each file they keep the order of the
    services in ``per_service``, then the order in which each service reported them.

    :param per_service: the messages reported by each service

    :return: a successful result if no service reported anything, a failed one
        carrying the grouped messages otherwise
    """
    messages: dict[str, list[Message]] = {}
    for service_messages in per_service.values():
        for message in service_messages:
            messages.setdefault(message.filename, []).append(message)

    return Result(success=not messages, messages=messages)
