"""Bilingual keyword tables used by the local heuristics.

Order matters: domains are scored in DOMAIN_ORDER and the earliest domain wins
ties; vocabulary terms are reported in the order they are listed here.
"""

DOMAIN_ORDER = ("programming", "mathematics", "science", "literature", "history", "business")

DOMAIN_KEYWORDS = {
    "programming": [
        "function", "variable", "loop", "array", "object", "class", "method", "algorithm", "code", "programming",
        "دالة", "متغير", "حلقة", "مصفوفة", "كائن", "فئة", "خوارزمية", "برمجة", "كود",
    ],
    "mathematics": [
        "equation", "formula", "theorem", "proof", "calculate", "solve", "mathematics", "number",
        "معادلة", "صيغة", "نظرية", "برهان", "حساب", "حل", "رياضيات", "رقم",
    ],
    "science": [
        "experiment", "hypothesis", "theory", "research", "analysis", "data", "result", "conclusion",
        "تجربة", "فرضية", "نظرية", "بحث", "تحليل", "بيانات", "نتيجة", "استنتاج",
    ],
    "literature": [
        "author", "poem", "story", "character", "theme", "style", "literary", "text",
        "مؤلف", "قصيدة", "قصة", "شخصية", "موضوع", "أسلوب", "أدبي", "نص",
    ],
    "history": [
        "historical", "period", "event", "civilization", "culture", "society", "war", "peace",
        "تاريخي", "فترة", "حدث", "حضارة", "ثقافة", "مجتمع", "حرب", "سلام",
    ],
    "business": [
        "management", "strategy", "market", "business", "company", "profit", "customer", "service",
        "إدارة", "استراتيجية", "سوق", "أعمال", "شركة", "ربح", "عميل", "خدمة",
    ],
}

# Concept terms looked up when building an Understanding.
DOMAIN_CONCEPTS = {
    "programming": [
        "algorithm", "data structure", "function", "variable", "loop", "condition", "class", "object",
        "inheritance", "polymorphism",
        "خوارزمية", "هيكل البيانات", "دالة", "متغير", "حلقة", "شرط", "فئة", "كائن", "وراثة", "تعدد الأشكال",
    ],
    "science": [
        "hypothesis", "theory", "experiment", "observation", "analysis", "conclusion", "variable", "control",
        "method", "result",
        "فرضية", "نظرية", "تجربة", "ملاحظة", "تحليل", "استنتاج", "متغير", "تحكم", "طريقة", "نتيجة",
    ],
    "mathematics": [
        "equation", "formula", "theorem", "proof", "function", "variable", "constant", "derivative", "integral",
        "limit",
        "معادلة", "صيغة", "نظرية", "برهان", "دالة", "متغير", "ثابت", "مشتقة", "تكامل", "نهاية",
    ],
    "literature": [
        "character", "theme", "plot", "setting", "style", "metaphor", "symbol", "narrative", "conflict",
        "resolution",
        "شخصية", "موضوع", "حبكة", "مكان", "أسلوب", "استعارة", "رمز", "سرد", "صراع", "حل",
    ],
    "history": [
        "civilization", "empire", "revolution", "dynasty", "treaty", "period", "event", "culture",
        "حضارة", "إمبراطورية", "ثورة", "سلالة", "معاهدة", "فترة", "حدث", "ثقافة",
    ],
    "business": [
        "strategy", "market", "management", "marketing", "profit", "customer", "investment", "competition",
        "استراتيجية", "سوق", "إدارة", "تسويق", "ربح", "عميل", "استثمار", "منافسة",
    ],
    "general": [],
}


def _merge(*term_lists):
    merged = []
    for terms in term_lists:
        for term in terms:
            if term not in merged:
                merged.append(term)
    return merged


# Every classification keyword is part of its domain's vocabulary, so a domain
# that wins classification always contributes at least one concept.
DOMAIN_VOCABULARY = {
    domain: _merge(DOMAIN_CONCEPTS.get(domain, []), DOMAIN_KEYWORDS.get(domain, []))
    for domain in DOMAIN_ORDER + ("general",)
}

# Short term lists for the direct (content-only) question fallback.
IMPORTANT_TERMS = {
    "programming": [
        "function", "variable", "class", "object", "method", "algorithm", "loop", "array",
        "دالة", "متغير", "فئة", "كائن", "خوارزمية", "حلقة", "مصفوفة",
    ],
    "science": ["theory", "experiment", "hypothesis", "analysis", "research", "نظرية", "تجربة", "فرضية", "تحليل", "بحث"],
    "mathematics": ["equation", "formula", "theorem", "proof", "معادلة", "صيغة", "نظرية", "برهان"],
    "literature": ["character", "theme", "style", "author", "شخصية", "موضوع", "أسلوب", "مؤلف"],
}

# Domain-specific testable point added to every heuristic Understanding.
DOMAIN_TESTABLE_POINTS = {
    "programming": {
        "type": "application",
        "difficulty": "hard",
        "ar": ("تطبيق المفاهيم البرمجية", "التطبيق العملي مهم في البرمجة"),
        "en": ("Applying the programming concepts", "Practical application matters in programming"),
    },
    "mathematics": {
        "type": "application",
        "difficulty": "hard",
        "ar": ("حل المسائل باستخدام القواعد الرياضية", "حل المسائل يثبت فهم القواعد"),
        "en": ("Solving problems with the mathematical rules", "Problem solving confirms the rules are understood"),
    },
    "science": {
        "type": "analysis",
        "difficulty": "hard",
        "ar": ("تحليل العمليات العلمية", "التحليل العلمي مهارة أساسية"),
        "en": ("Analyzing the scientific processes", "Scientific analysis is a core skill"),
    },
    "literature": {
        "type": "analysis",
        "difficulty": "medium",
        "ar": ("تحليل الأساليب الأدبية في النص", "تحليل الأسلوب يعمق فهم النص"),
        "en": ("Analyzing the literary techniques in the text", "Analyzing style deepens understanding of the text"),
    },
    "history": {
        "type": "analysis",
        "difficulty": "medium",
        "ar": ("تحليل أسباب الأحداث ونتائجها", "ربط الأسباب بالنتائج أساس الفهم التاريخي"),
        "en": ("Analyzing the causes and consequences of events", "Linking causes to outcomes is the basis of historical understanding"),
    },
    "business": {
        "type": "application",
        "difficulty": "medium",
        "ar": ("تطبيق المفاهيم الإدارية على حالات عملية", "الحالات العملية تختبر الفهم الإداري"),
        "en": ("Applying the business concepts to practical cases", "Practical cases test business understanding"),
    },
    "general": {
        "type": "application",
        "difficulty": "medium",
        "ar": ("تطبيق الأفكار الرئيسية في مواقف جديدة", "التطبيق يثبت الفهم"),
        "en": ("Applying the main ideas to new situations", "Application confirms understanding"),
    },
}

# Keyword rules for guessing the cognitive level of a question text, checked in order.
COGNITIVE_LEVEL_RULES = (
    ("knowledge", ("ما هو", "what is", "تعريف")),
    ("comprehension", ("كيف", "how", "لماذا")),
    ("application", ("استخدم", "طبق", "apply")),
    ("analysis", ("قارن", "حلل", "analyze")),
    ("synthesis", ("أنشئ", "صمم", "create")),
    ("evaluation", ("قيم", "evaluate", "نقد")),
)
