"""Example posts written on first run, when the post collection is empty."""

from __future__ import annotations

from datetime import datetime, timedelta

from taman.content.models import CURRENT_SCHEMA_VERSION, DEFAULT_AUTHOR, Comment, Post, PostStatus

_MINIMALISM = """Minimalisme bukan hanya tentang menghilangkan elemen; ini tentang memperkuat apa yang penting. Di dunia yang jenuh dengan informasi, kejelasan adalah kemewahan tertinggi.

Ketika kita mendesain dengan pengendalian diri, kita memaksa diri kita untuk membuat keputusan yang lebih sulit. Apa yang esensial? Apa yang hanya hiasan? Setiap piksel yang ditambahkan mengurangi penonjolan dari segala hal lainnya.

### Biaya kognitif dari kekacauan

Pengguna datang ke aplikasi kita dengan cadangan perhatian yang terbatas. Antarmuka yang kompleks membebani cadangan ini dengan segera. Dengan mengurangi gangguan visual, menggunakan ruang kosong, tipografi yang halus, dan jarak yang konsisten, kita menghormati energi mental pengguna.

> "Kesempurnaan dicapai, bukan ketika tidak ada lagi yang bisa ditambahkan, tetapi ketika tidak ada lagi yang bisa diambil." - Antoine de Saint-Exupéry

Filosofi ini meluas lebih dari sekadar piksel. Ini memengaruhi cara kita menulis kode, cara kita mengatur hari-hari kita, dan cara kita berkomunikasi. Kesederhanaan adalah sebuah disiplin."""

_GLASS = """Glassmorphism telah kembali, berevolusi dari estetika kaca buram antarmuka OS awal menjadi alat yang canggih untuk membangun hierarki.

Dengan melapisi permukaan yang tembus cahaya, kita dapat menciptakan rasa kedalaman tanpa bergantung pada bayangan jatuh yang berat atau batas yang kaku. Ini meniru dunia fisik: melihat melalui jendela, melihat latar belakang yang kabur. Koneksi ke realitas ini membumikan antarmuka pengguna.

Ini sangat cocok dengan mode gelap, di mana sumber cahaya dapat menciptakan sorotan spekular halus pada tepi "kaca", membuat UI terasa premium dan taktil."""

_SILENCE = """Kita sering berbicara tentang kode yang bersih, tetapi seperti apa suaranya? Suaranya seperti keheningan. Itu adalah ketiadaan gesekan saat membaca sebuah fungsi.

Jika Anda harus berhenti untuk memecahkan kode nama variabel, itu adalah kebisingan. Jika Anda harus melompat ke tiga file berbeda untuk memahami perubahan status, itu adalah statis.

Menulis kode adalah bentuk komunikasi dengan diri masa depan Anda dan tim Anda. Perlakukan itu dengan perhatian yang sama seperti Anda menulis surat."""


def example_posts(now: datetime) -> list[Post]:
    """Build the three example posts, dated relative to ``now``."""
    return [
        Post(
            id="1",
            title="Seni Desain Minimalis",
            excerpt=(
                'Menjelajahi mengapa "kurang" seringkali berarti "lebih" '
                "dalam antarmuka digital dan beban kognitif."
            ),
            content=_MINIMALISM,
            date=now - timedelta(days=2),
            read_time="3 min baca",
            tags=["Desain", "Filosofi"],
            likes=42,
            shares=12,
            author_username=DEFAULT_AUTHOR,
            comments=[
                Comment(
                    id="c1",
                    author_username="pengunjung",
                    content="Tulisan yang sangat membuka wawasan!",
                    date=now - timedelta(milliseconds=80_000_000),
                )
            ],
            status=PostStatus.PUBLISHED,
            schema_version=CURRENT_SCHEMA_VERSION,
        ),
        Post(
            id="2",
            title="Refleksi tentang Glassmorphism",
            excerpt=(
                "Bagaimana transluensi dan blur menciptakan kedalaman dan "
                "hierarki dalam aplikasi web modern."
            ),
            content=_GLASS,
            date=now - timedelta(days=5),
            read_time="2 min baca",
            tags=["UI", "Tren"],
            likes=28,
            shares=5,
            author_username=DEFAULT_AUTHOR,
            status=PostStatus.PUBLISHED,
            schema_version=CURRENT_SCHEMA_VERSION,
        ),
        Post(
            id="3",
            title="Keheningan dalam Kode",
            excerpt=(
                'Mengapa komentar harus menjelaskan "mengapa", bukan "bagaimana", '
                "dan keindahan logika yang mendokumentasikan dirinya sendiri."
            ),
            content=_SILENCE,
            date=now - timedelta(days=10),
            read_time="4 min baca",
            tags=["Teknik", "Koding"],
            likes=35,
            shares=8,
            author_username=DEFAULT_AUTHOR,
            status=PostStatus.PUBLISHED,
            schema_version=CURRENT_SCHEMA_VERSION,
        ),
    ]
