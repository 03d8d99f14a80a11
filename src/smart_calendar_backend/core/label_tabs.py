'''
Label tab bookkeeping.

Every label owns a strip of note tabs: the built-in "global" and "instance"
tabs plus custom ones ("tab-<uuid>"). Closing a tab moves it to the trash,
restoring brings it back, deleting forever drops it (and its content) for
good. All functions return a new Label and leave the input untouched; an
operation that does not apply returns the label unchanged.
'''
import uuid

from ..models.labels import Label, CustomTab

DEFAULT_OPEN_TABS = ["global", "instance"]
CUSTOM_TAB_PREFIX = "tab-"


def new_label(name: str, color: str) -> Label:
    return Label(
        id=str(uuid.uuid4()),
        name=name,
        color=color,
        open_tabs=list(DEFAULT_OPEN_TABS),
    )


def add_tab(label: Label, max_tabs: int) -> Label:
    """Opens a new empty custom tab titled "Note N", unless the label is full."""
    if len(label.open_tabs) + len(label.trashed_tabs) >= max_tabs:
        return label

    tab_id = f"{CUSTOM_TAB_PREFIX}{uuid.uuid4()}"
    tab = CustomTab(id=tab_id, title=f"Note {len(label.custom_tabs) + 1}")
    return label.model_copy(update={
        'open_tabs': [*label.open_tabs, tab_id],
        'custom_tabs': {**label.custom_tabs, tab_id: tab}
    })


def close_tab(label: Label, tab_id: str) -> Label:
    if tab_id not in label.open_tabs:
        return label
    return label.model_copy(update={
        'open_tabs': [t for t in label.open_tabs if t != tab_id],
        'trashed_tabs': [*label.trashed_tabs, tab_id]
    })


def restore_tab(label: Label, tab_id: str) -> Label:
    if tab_id not in label.trashed_tabs:
        return label
    return label.model_copy(update={
        'trashed_tabs': [t for t in label.trashed_tabs if t != tab_id],
        'open_tabs': [*label.open_tabs, tab_id]
    })


def delete_tab_forever(label: Label, tab_id: str) -> Label:
    """Only trashed tabs can be deleted. Built-in tabs keep no content of their own."""
    if tab_id not in label.trashed_tabs:
        return label
    custom_tabs = dict(label.custom_tabs)
    if tab_id.startswith(CUSTOM_TAB_PREFIX):
        custom_tabs.pop(tab_id, None)
    return label.model_copy(update={
        'trashed_tabs': [t for t in label.trashed_tabs if t != tab_id],
        'custom_tabs': custom_tabs
    })


def update_custom_tab(label: Label, tab_id: str, content: str) -> Label:
    tab = label.custom_tabs.get(tab_id)
    if tab is None:
        return label
    return label.model_copy(update={
        'custom_tabs': {**label.custom_tabs, tab_id: tab.model_copy(update={'content': content})}
    })


def reorder_tabs(label: Label, new_order: list[str]) -> Label:
    """new_order must be a permutation of the currently open tabs."""
    if sorted(new_order) != sorted(label.open_tabs):
        return label
    return label.model_copy(update={'open_tabs': list(new_order)})
