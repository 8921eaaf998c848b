"""Device tokens registered by users for push delivery."""

from datetime import UTC, datetime

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from cellar.domain import cellar
from cellar.shared.lookup import find_all, find_first


@cellar.aggregate
class DeviceToken:
    user_id = Identifier(required=True)
    token = String(required=True, max_length=500)
    registered_at = DateTime()


@cellar.command(part_of="DeviceToken")
class RegisterDeviceToken:
    user_id = Identifier(required=True)
    token = String(required=True, max_length=500)


@cellar.command(part_of="DeviceToken")
class UnregisterDeviceToken:
    user_id = Identifier(required=True)
    token = String(required=True, max_length=500)


@cellar.command_handler(part_of=DeviceToken)
class DeviceTokenHandler:
    @handle(RegisterDeviceToken)
    def register(self, command):
        existing = find_first(DeviceToken, user_id=str(command.user_id), token=command.token)
        if existing is not None:
            return str(existing.id)

        device = DeviceToken(user_id=command.user_id, token=command.token, registered_at=datetime.now(UTC))
        current_domain.repository_for(DeviceToken).add(device)
        return str(device.id)

    @handle(UnregisterDeviceToken)
    def unregister(self, command):
        existing = find_first(DeviceToken, user_id=str(command.user_id), token=command.token)
        if existing is not None:
            current_domain.repository_for(DeviceToken)._dao.delete(existing)


def tokens_by_user(user_ids=None) -> dict[str, list[str]]:
    """Registered tokens grouped by user, for the given users or everyone."""
    grouped: dict[str, list[str]] = {}
    if user_ids is None:
        devices = find_all(DeviceToken)
    else:
        devices = [d for user_id in user_ids for d in find_all(DeviceToken, user_id=str(user_id))]
    for device in devices:
        tokens = grouped.setdefault(str(device.user_id), [])
        if device.token not in tokens:
            tokens.append(device.token)
    return grouped
