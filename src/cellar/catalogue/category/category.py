"""Category aggregate: a named grouping of wines (red, white, sparkling...)."""

from datetime import UTC, datetime

from protean.fields import DateTime, String, Text

from cellar.domain import cellar


@cellar.aggregate
class Category:
    name = String(required=True, max_length=100)
    description = Text()
    image_url = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, description=None, image_url=None):
        now = datetime.now(UTC)
        return cls(
            name=name.strip(),
            description=description,
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )

    def update(self, name=None, description=None, image_url=None):
        if name is not None:
            self.name = name.strip()
        if description is not None:
            self.description = description
        if image_url is not None:
            self.image_url = image_url
        self.updated_at = datetime.now(UTC)
