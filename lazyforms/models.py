import json
import time

from .extensions import db


def now_ms():
    return int(time.time() * 1000)


class EntryRecord(db.Model):
    """A stored field value and the context it applies to."""
    __tablename__ = "entries"

    id = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False, default="")
    label = db.Column(db.String(200), nullable=True)
    context_type = db.Column(db.String(20), nullable=False)
    context_key = db.Column(db.Text, nullable=True)
    # Normalized key combo; uniqueness is checked case-insensitively on write
    shortcut = db.Column(db.String(64), nullable=True, unique=True)
    order = db.Column(db.Float, nullable=True)
    created_at = db.Column(db.BigInteger, nullable=False, default=now_ms)

    def to_dict(self):
        """Serializes the entry in the extension's storage schema."""
        data = {
            "id": self.id,
            "value": self.value,
            "contextType": self.context_type,
            "contextKey": self.context_key,
            "createdAt": self.created_at,
        }
        if self.label:
            data["label"] = self.label
        if self.shortcut:
            data["shortcut"] = self.shortcut
        if self.order is not None:
            data["order"] = int(self.order) if float(self.order).is_integer() else self.order
        return data


class Setting(db.Model):
    """A single extension setting stored as JSON."""
    __tablename__ = "settings"

    key = db.Column(db.String(64), primary_key=True)
    value_json = db.Column(db.Text, nullable=False)

    @property
    def value(self):
        return json.loads(self.value_json)

    @value.setter
    def value(self, new_value):
        self.value_json = json.dumps(new_value)
