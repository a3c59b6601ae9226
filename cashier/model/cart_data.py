class CartData:
    def __init__(self):
        self.items = {}  # {"item_id": qty}, qty is always > 0

    def set_quantity(self, item_id, qty):
        """Upsert the quantity; 0 or less removes the item."""
        qty = max(int(qty), 0)
        if qty == 0:
            self.items.pop(item_id, None)
        else:
            self.items[item_id] = qty

    def increment(self, item_id):
        self.set_quantity(item_id, self.get_quantity(item_id) + 1)

    def decrement(self, item_id):
        self.set_quantity(item_id, self.get_quantity(item_id) - 1)

    def get_quantity(self, item_id):
        return self.items.get(item_id, 0)

    def get_item_ids(self):
        return list(self.items)

    def to_line_items(self):
        return [(item_id, qty) for item_id, qty in self.items.items()]

    def total_selected_count(self):
        return len(self.items)

    def is_empty(self):
        return not self.items

    def clear(self):
        """Empty the cart for the next customer."""
        self.items = {}
