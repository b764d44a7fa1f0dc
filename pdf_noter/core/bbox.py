from typing import List, Dict

# --- Coordinate helpers ---
# Regions are normalized (0..1, origin top-left). pdfplumber uses points with
# origin top-left; PDF user space has origin bottom-left, y up.

def flip_y(page_height: float, y: float) -> float:
    """Convert between PDF user-space Y and pdfplumber Y (the mapping is its own inverse)."""
    return float(page_height) - float(y)


def quad_to_bbox(quad: List[float], width: float, height: float) -> List[float]:
    """Normalized (x1, y1, x2, y2) -> [x0, top, x1, bottom] in page points."""
    x1, y1, x2, y2 = quad
    xs = sorted([float(x1) * width, float(x2) * width])
    ys = sorted([float(y1) * height, float(y2) * height])
    return [xs[0], ys[0], xs[1], ys[1]]


def quadpoints_to_quad(points: List[float], width: float, height: float) -> List[float]:
    """One PDF /QuadPoints group (8 numbers, user space) -> normalized quad."""
    xs = [float(points[i]) for i in (0, 2, 4, 6)]
    ys = [flip_y(height, points[i]) for i in (1, 3, 5, 7)]
    return [min(xs) / width, min(ys) / height, max(xs) / width, max(ys) / height]


def clamp_bbox(bbox: List[float], width: float, height: float) -> List[float]:
    x0, top, x1, bottom = bbox
    return [
        min(max(x0, 0.0), width),
        min(max(top, 0.0), height),
        min(max(x1, 0.0), width),
        min(max(bottom, 0.0), height),
    ]


def union_boxes(boxes: List[List[float]]) -> List[float]:
    x0 = min(b[0] for b in boxes)
    y0 = min(b[1] for b in boxes)
    x1 = max(b[2] for b in boxes)
    y1 = max(b[3] for b in boxes)
    return [x0, y0, x1, y1]


# --- Text under a region ---

def _intersects(bbox, w) -> bool:
    x0, top, x1, bottom = bbox
    return not (w["x1"] <= x0 or w["x0"] >= x1 or w["bottom"] <= top or w["top"] >= bottom)


def text_from_words(bbox: List[float], words: List[Dict], line_tol: float = 3.0) -> str:
    """Join the words overlapping `bbox`, grouped into lines by their top edge."""
    inside = sorted((w for w in words if _intersects(bbox, w)), key=lambda w: (w["top"], w["x0"]))
    lines: List[List[Dict]] = []
    for w in inside:
        if lines and abs(w["top"] - lines[-1][-1]["top"]) <= line_tol:
            lines[-1].append(w)
        else:
            lines.append([w])
    line_texts = [" ".join(w["text"] for w in sorted(line, key=lambda w: w["x0"])) for line in lines]
    return " ".join(t.strip() for t in line_texts if t.strip())
