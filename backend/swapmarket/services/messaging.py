"""Messaging — direct messages between users; each one notifies its recipient."""

from swapmarket.core.domain_types import ProductId, UserId
from swapmarket.core.errors import InvalidMessageError, ResourceNotFoundError
from swapmarket.core.repository_protocols import EventSink, SwapStore
from swapmarket.core.swap_entities import MessageView
from swapmarket.core import swap_events


class MessageService:

    def __init__(self, store: SwapStore, events: EventSink):
        self.store = store
        self.events = events

    async def send(
        self,
        sender_id: UserId,
        recipient_id: UserId,
        content: str,
        product_id: ProductId | None = None,
    ) -> MessageView:
        content = content.strip()
        if not content:
            raise InvalidMessageError("Message content cannot be empty.")
        if sender_id == recipient_id:
            raise InvalidMessageError("You cannot message yourself.")
        async with self.store.transaction():
            for user_id in (sender_id, recipient_id):
                if not await self.store.user_exists(user_id):
                    raise ResourceNotFoundError("User", str(user_id))
            if product_id is not None and await self.store.get_product(product_id) is None:
                raise ResourceNotFoundError("Product", str(product_id))
            message = await self.store.insert_message(
                sender_id, recipient_id, content, product_id,
            )
        self.events.emit(
            swap_events.message_sent(message.id, recipient_id, product_id),
        )
        return message
