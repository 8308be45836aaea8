# protodeck

protodeck provides building blocks for a workspace that inspects raw Protocol Buffers data without a schema. It covers:

- reading what a user pastes, as hex or base64 (`protodeck.inputs`);
- splitting length-prefixed envelope streams into frames (`protodeck.envelope`);
- building hex and text cells for a hex viewer (`protodeck.hexcells`);
- keeping a local catalog of saved messages, grouped into classes (`protodeck.model`, `protodeck.storage`, `protodeck.service`, `protodeck.prefs`);
- grouping, filtering, selecting and renaming entries in a message list (`protodeck.catalog`, `protodeck.selection`).

Errors that are meant to be shown to a user are raised as `protodeck.errors.UiError`.

## Installation

```
pip install protodeck
```

To run the tests, install the `test` extra:

```
pip install "protodeck[test]"
```

## Decoding user input

`decode_user_input` tries each accepted form of input and returns the bytes from the first one that works:

1. hex, with or without a `0x` prefix;
2. standard base64;
3. URL-safe base64;
4. URL-safe base64 without padding.

Whitespace is ignored. If the input is empty, or if none of the forms match, it raises `UiError`.

The module also provides these helpers:

- `encode_base64` produces standard base64 with padding.
- `encode_base64_url` produces URL-safe base64 without padding.
- `decode_base64_url` decodes URL-safe base64 without padding.

```python
from protodeck.inputs import decode_user_input, encode_base64, encode_base64_url

data = decode_user_input("08 96 01")
assert data == b"\x08\x96\x01"
assert encode_base64(data) == "CJYB"
assert encode_base64_url(data) == "CJYB"
```

## Envelope frames

An envelope is a sequence of frames. Each frame is laid out as:

1. a one-byte flags field;
2. a four-byte big-endian payload length;
3. the payload.

In the flags, bit `0x01` marks a compressed payload and bit `0x02` marks a JSON payload.

```python
from protodeck.envelope import parse_envelope_frames

stream = bytes([0x00, 0, 0, 0, 3, 0x08, 0x96, 0x01])
(frame,) = parse_envelope_frames(stream)
assert frame.payload(stream) == b"\x08\x96\x01"
assert not frame.is_compressed()
```

`parse_envelope_frames` raises `UiError` in three cases:

- the stream is empty;
- the stream ends partway through a frame header;
- a frame declares more payload bytes than remain in the stream.

Three functions describe a frame for display: `frame_meta_line`, `frame_suffix` and `frame_title`. The last two also report results recorded in an `EnvelopeFrameMeta`: the decompression outcome and any decode errors.

## Hex viewer cells

`protodeck.hexcells` works with rows of 16 bytes and provides:

- `hex_cell(byte)`, which returns two upper-case hex digits followed by a space;
- `ascii_cell(byte)`, which returns the printable ASCII character, or `.` for anything else;
- `utf8_cell(data, index)`, which returns the cell used in Unicode mode. A multi-byte UTF-8 character is shown once, on its lead byte. Its continuation bytes become placeholders. Control characters are shown as `.`;
- `HexTextMode`, the choice between ASCII and Unicode text, with `label()` and `toggle()`;
- `row_count`, which gives the number of rows for a length;
- `row_label`, which gives a row's offset label in five hex digits;
- `clamp_scroll`, which clamps a scroll position so the last row does not scroll past the bottom of the viewport.

## Message catalog

`MessageStore` keeps message bytes, message metadata, class names and per-class auto-expand paths in one SQLite database. By default the database is held in memory; pass a file path to keep it on disk. A `MessageStore` can be used as a context manager.

`MessageService` works on top of a store and a `Preferences` object:

```python
from protodeck.model import LoadedBytesMode
from protodeck.service import MessageService
from protodeck.storage import MessageStore

with MessageStore() as store:
    service = MessageService(store)
    message_id = service.create_message("login request", b"\x08\x01")
    loaded = service.load_message_bytes(message_id)
    assert loaded.data == b"\x08\x01"
    assert loaded.mode is LoadedBytesMode.PROTOBUF
    assert service.list_messages()[0].class_name == "login request"
```

The service offers these operations:

- **Listing.** `list_messages` returns messages with the most recently modified first.
- **Editing.** `create_message`, `rename_message`, `rename_class`, `update_message_bytes` and `bump_message_modified`.
- **Deleting.** `delete_message` also clears a class's settings once the class has no messages left.
- **Frame references.** `create_envelope_frame_ref_in_same_class` creates a message that points at one frame of another message's envelope. When such a message is loaded, its payload is sliced out. If the reference asks for decompression, the service tries gzip, deflate, raw deflate and brotli (see `decompress`), trying first the format that last worked for that class. Frames flagged as JSON are returned in raw mode with a note.
- **Auto-expand paths.** `load_auto_expand_paths` and `store_auto_expand_paths` read and save the field paths to auto-expand for each class.

`Preferences` stores its values in any mutable string mapping, a plain dict by default. It holds:

- the current message;
- the frame name template;
- the theme (`light`, `dark` or `system`);
- the counter for new message ids.

`download_filename` turns a message name into a safe `.bin` file name.

`protodeck.model` defines the record types (`MessageRecord`, `EnvelopeFrameRef`, `MessageMeta`, `LoadedBytes`) and converts them to and from the dictionaries that are stored.

## Message list helpers

`protodeck.catalog` provides:

- `build_groups`, which groups messages by class after filtering them by name or class name;
- `sort_members`, which orders a class with the root first and then the newest;
- `class_label` and `default_select_id`, which give a class row's label and the message to open when the row is clicked.

`protodeck.selection` provides:

- `DeleteSelection`, which tracks which messages are marked for deletion;
- `class_select_state`, which reports whether none, some or all of a class is marked;
- `RenameSession`, which handles an in-place rename driven by Enter, Escape and loss of focus;
- `ImportMode`, the choice between importing plain bytes and importing an envelope.

## What this package does not do

This package does not decode or edit Protocol Buffers fields. It has no field tree and no summaries of field values, and it has no command-line tool or graphical viewer. It supplies the input handling, framing, hex cells and storage that such a viewer would be built on.